"""
Shared fixtures for branchweight tests.

GitRepo drives the real git executable to build small throwaway
repositories. fake_git writes a stand-in git script for exercising the
streaming pipeline against output real git would never produce.
"""

import os
import shutil
import subprocess
import sys
import textwrap
from pathlib import Path

import pytest

GIT_ENV = {
    'GIT_AUTHOR_NAME': 'Test Author',
    'GIT_AUTHOR_EMAIL': 'author@example.com',
    'GIT_COMMITTER_NAME': 'Test Author',
    'GIT_COMMITTER_EMAIL': 'author@example.com',
    'GIT_CONFIG_NOSYSTEM': '1',
}

SHARED_CONTENT = b'S' * 1000
A_CONTENT = b'A' * 500
B_CONTENT = b'B' * 700


class GitRepo:
    """A throwaway git repository driven through the git CLI."""

    def __init__(self, path: Path):
        self.path = path

    @classmethod
    def init(cls, path: Path, branch: str = 'main') -> 'GitRepo':
        path.mkdir(parents=True, exist_ok=True)
        repo = cls(path)
        repo.git('init', '-q')
        repo.git('symbolic-ref', 'HEAD', f'refs/heads/{branch}')
        repo.git('config', 'commit.gpgsign', 'false')
        return repo

    def git(self, *args: str) -> str:
        env = dict(os.environ, **GIT_ENV)
        result = subprocess.run(
            ['git', *args],
            cwd=self.path,
            env=env,
            capture_output=True,
            text=True,
            check=True,
        )
        return result.stdout.strip()

    def commit(self, files: dict, message: str = 'update') -> str:
        """Write (or delete, for None) files, commit everything, return the commit id."""
        for name, content in files.items():
            target = self.path / name
            if content is None:
                target.unlink()
                continue
            target.parent.mkdir(parents=True, exist_ok=True)
            if isinstance(content, str):
                content = content.encode('utf-8')
            target.write_bytes(content)
        self.git('add', '-A')
        self.git('commit', '-q', '-m', message)
        return self.rev_parse('HEAD')

    def checkout(self, branch: str, new: bool = False) -> None:
        if new:
            self.git('checkout', '-q', '-b', branch)
        else:
            self.git('checkout', '-q', branch)

    def rev_parse(self, rev: str) -> str:
        return self.git('rev-parse', rev)

    def blob_id(self, content: bytes) -> str:
        result = subprocess.run(
            ['git', 'hash-object', '--stdin'],
            cwd=self.path,
            input=content,
            capture_output=True,
            check=True,
        )
        return result.stdout.decode().strip()


@pytest.fixture
def make_repo(tmp_path):
    """Factory creating empty repositories under tmp_path; skips without git."""
    if shutil.which('git') is None:
        pytest.skip("git executable not available")

    def make(name: str = 'repo', branch: str = 'main') -> GitRepo:
        return GitRepo.init(tmp_path / name, branch=branch)

    return make


@pytest.fixture
def branch_repo(make_repo):
    """
    Repository with two unmerged branches sharing one blob.

    \b
    main        README.md
    feature-a   + shared.bin (1000 B), a.bin (500 B)         one commit
    feature-b   + shared.bin (1000 B); then + b.bin (700 B)  two commits
    done        + done.txt, fast-forward merged into main
    """
    repo = make_repo()
    repo.commit({'README.md': 'hello\n'}, 'initial')

    repo.checkout('feature-a', new=True)
    repo.commit({'shared.bin': SHARED_CONTENT, 'a.bin': A_CONTENT}, 'feature a')

    repo.checkout('main')
    repo.checkout('feature-b', new=True)
    repo.commit({'shared.bin': SHARED_CONTENT}, 'shared on b')
    repo.commit({'b.bin': B_CONTENT}, 'feature b')

    repo.checkout('main')
    repo.checkout('done', new=True)
    repo.commit({'done.txt': 'done\n'}, 'done')
    repo.checkout('main')
    repo.git('merge', '-q', '--ff-only', 'done')

    return repo


@pytest.fixture
def fake_git(tmp_path):
    """
    Factory writing an executable fake git script.

    The body is Python source with ``argv`` (sys.argv[1:]) in scope; its
    return value becomes the exit status.
    """
    bin_dir = tmp_path / 'fake-bin'
    bin_dir.mkdir()

    def make(body: str, name: str = 'git') -> str:
        script = bin_dir / name
        script.write_text(
            f"#!{sys.executable}\n"
            "import sys\n"
            "\n"
            "def main(argv):\n"
            + textwrap.indent(textwrap.dedent(body).strip() + "\n", "    ")
            + "\n"
            "if __name__ == '__main__':\n"
            "    raise SystemExit(main(sys.argv[1:]) or 0)\n",
            encoding='utf-8',
        )
        script.chmod(0o755)
        return str(script)

    return make
