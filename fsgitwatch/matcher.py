"""Remote URL normalization and owner/repo matching."""

from __future__ import annotations

from urllib.parse import urlsplit

from fsgitwatch.models import NormalizedIdentity, SearchPattern

SUPPORTED_SCHEMES = frozenset({'https', 'http', 'ssh', 'git', 'git+ssh', 'ssh+git'})


def normalize_remote_url(url: str) -> NormalizedIdentity | None:
    """Extract the (owner, repo) identity from an SSH or HTTPS remote URL.

    Accepts ``git@host:owner/repo[.git]``, ``https://host/owner/repo[.git]``
    and the other scheme forms git understands (``ssh://``, ``git://``,
    ``http://``). Returns None for anything that is not shaped like a hosted
    remote; an unrecognized URL is unrelated to the search, not an error.
    """
    if not url:
        return None

    if '://' in url:
        path = _scheme_url_path(url.strip())
    else:
        path = _scp_url_path(url.strip())
    if path is None:
        return None

    path = path.rstrip('/')
    if path.endswith('.git'):
        path = path[:-len('.git')].rstrip('/')

    segments = [s for s in path.split('/') if s]
    if len(segments) < 2:
        return None

    return NormalizedIdentity(owner=segments[-2], repo=segments[-1])


def _scheme_url_path(url: str) -> str | None:
    try:
        parts = urlsplit(url)
        host = parts.hostname
    except ValueError:
        return None
    if parts.scheme.lower() not in SUPPORTED_SCHEMES or not host:
        return None
    return parts.path


def _scp_url_path(url: str) -> str | None:
    # scp-like syntax: [user@]host:path, with no slash before the first colon
    host, sep, path = url.partition(':')
    if not sep or '/' in host:
        return None
    host = host.rpartition('@')[2]
    if not host or any(c.isspace() for c in host):
        return None
    return path


def matches(identity: NormalizedIdentity | None, pattern: SearchPattern) -> bool:
    """True iff owner and repo are equal under case-insensitive comparison."""
    if identity is None:
        return False
    return (identity.owner.casefold() == pattern.owner.casefold()
            and identity.repo.casefold() == pattern.repo.casefold())


def remote_matches(url: str, pattern: SearchPattern) -> bool:
    """Normalize a remote URL and compare it against the pattern."""
    return matches(normalize_remote_url(url), pattern)
