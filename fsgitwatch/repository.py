"""GitPython-based remote inspection, isolated on its own thread pool."""

from __future__ import annotations

import asyncio
import concurrent.futures
import configparser
import logging
import os
from pathlib import Path

from git import InvalidGitRepositoryError, NoSuchPathError, Repo

from fsgitwatch.errors import RepositoryReadError
from fsgitwatch.models import RemoteReference


class GitRemoteInspector:
    """Lists the remotes of a repository root without touching its state.

    GitPython reads config files synchronously, so every read runs on a
    dedicated executor. Directory listing uses the loop's default executor,
    which keeps a slow repository read from starving traversal.
    """

    def __init__(self, max_workers: int | None = None):
        """Create an inspector backed by a thread pool of max_workers threads."""
        if max_workers is None:
            max_workers = min(os.cpu_count() or 4, 8)
        self._executor = concurrent.futures.ThreadPoolExecutor(
            max_workers=max_workers,
            thread_name_prefix='fsgitwatch-inspect',
        )
        self._logger = logging.getLogger(__name__)

    def __enter__(self) -> GitRemoteInspector:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self, wait: bool = True) -> None:
        """Shut down the inspection pool, discarding reads not yet started."""
        self._executor.shutdown(wait=wait, cancel_futures=True)

    async def inspect(self, path: Path) -> list[RemoteReference]:
        """Return all configured remotes of the repository at path."""
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(self._executor, self.list_remotes, path)

    def list_remotes(self, path: Path) -> list[RemoteReference]:
        """Blocking read of every [remote "name"] url, in configuration order."""
        repo = None
        try:
            repo = Repo(path, search_parent_directories=False)
            _check_config_readable(Path(repo.common_dir) / 'config')
            remotes = []
            for remote in repo.remotes:
                try:
                    url = remote.config_reader.get('url')
                except (configparser.NoOptionError, configparser.NoSectionError):
                    self._logger.debug("Remote %s in %s has no url", remote.name, path)
                    continue
                remotes.append(RemoteReference(name=remote.name, url=url))
            return remotes
        except InvalidGitRepositoryError:
            raise RepositoryReadError(path, "not a valid git repository") from None
        except NoSuchPathError:
            raise RepositoryReadError(path, "repository path disappeared") from None
        except (configparser.Error, ValueError) as e:
            raise RepositoryReadError(path, f"malformed git config: {e}") from e
        except OSError as e:
            raise RepositoryReadError(path, e.strerror or str(e)) from e
        finally:
            if repo is not None:
                repo.close()


def _check_config_readable(config_path: Path) -> None:
    # GitConfigParser silently skips unreadable files; surface them as OSError
    if config_path.exists():
        with open(config_path, 'rb'):
            pass
