"""Repository URL Resolver: 알려진 호스팅 패턴으로 저장소 URL 을 정규화."""
from typing import Optional

from formula_miner.parser import patterns


def match_repository(url: str) -> Optional[str]:
    """
    GitHub/GitLab/Bitbucket 저장소 URL 이면 `https://<host>/<owner>/<repo>.git`.

    `.git`, 끝 슬래시, query string 은 떼고 다시 `.git` 을 붙인다.
    """
    m = patterns.KNOWN_HOST_REPOSITORY.match(url)
    if not m:
        return None
    host, owner, repo = m.groups()
    return f"https://{host}/{owner}/{repo}.git"


def match_archive(url: str) -> Optional[str]:
    """릴리스/아카이브/태그 다운로드 URL 에서 저장소 경로를 뽑아낸다."""
    for pattern in patterns.ARCHIVE_PATTERNS:
        m = pattern.match(url)
        if m:
            return m.group(1).removesuffix(".git") + ".git"
    return None


def resolve_repo_url(
    head: Optional[str] = None,
    homepage: Optional[str] = None,
    stable: Optional[str] = None,
    mirror: Optional[str] = None,
) -> str:
    """
    저장소 URL 결정. 먼저 맞는 규칙이 이긴다.

    1. head URL (그대로)
    2. homepage 가 알려진 호스트의 저장소 URL
    3. stable URL 이 저장소 URL, 4. 또는 아카이브 URL
    5. mirror URL 에 3, 4 와 같은 검사
    6. `.git` 으로 끝나는 stable/mirror URL

    모두 실패하면 빈 문자열 (알 수 없음, 에러 아님).
    """
    if head:
        return head

    if homepage:
        repository = match_repository(homepage)
        if repository:
            return repository

    for candidate in (stable, mirror):
        if not candidate:
            continue
        repository = match_repository(candidate) or match_archive(candidate)
        if repository:
            return repository

    for candidate in (stable, mirror):
        if candidate and candidate.endswith(".git"):
            return candidate

    return ""
