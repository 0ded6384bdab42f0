"""
Formula DSL 정규식 모음.

최상위 문장은 2칸(또는 탭) 들여쓰기로 고정한다. livecheck, resource 블록 안의
url 처럼 더 깊은 줄은 최상위 필드가 아니다.
"""
import re

TOP = r"(?:  |\t)"

# macOS 버전 이름 (on_<name> 블록, since:, macos: 인자)
MACOS_VERSIONS = (
    "tahoe",
    "sequoia",
    "sonoma",
    "ventura",
    "monterey",
    "big_sur",
    "catalina",
    "mojave",
    "high_sierra",
    "sierra",
    "el_capitan",
    "yosemite",
)

# ---- 필드 ----
HOMEPAGE = re.compile(r'^\s*homepage\s+"([^"]+)"')
URL = re.compile(rf'^{TOP}url\s+"([^"]+)"')
URL_BEGIN = re.compile(rf'^{TOP}url\s+"[^"]+".*,\s*(?:#.*)?$')
BLOCK_URL = re.compile(r'^\s+url\s+"([^"]+)"')
MIRROR = re.compile(rf'^{TOP}mirror\s+"([^"]+)"')
BLOCK_MIRROR = re.compile(r'^\s+mirror\s+"([^"]+)"')
TAG = re.compile(r'\btag:\s*"([^"]+)"')
TRAILING_COMMA = re.compile(r',\s*(?:#.*)?$')

LICENSE = re.compile(rf'^{TOP}license\s+(.+?)\s*(?:#.*)?$')
LICENSE_START = re.compile(rf'^{TOP}license\b')
LICENSE_KEYWORD = re.compile(r'^\s*license\s*')
TRAILING_COMMENT = re.compile(r'\s*#.*$')

HEAD = re.compile(rf'^{TOP}head\s+"([^"]+)"')
HEAD_BEGIN = re.compile(rf'^{TOP}head\s+do\s*$')
STABLE_BEGIN = re.compile(rf'^{TOP}stable\s+do\s*$')
TOP_BLOCK_END = re.compile(rf'^{TOP}end\s*(?:#.*)?$')

DEPENDENCY_BEGIN = re.compile(rf'^{TOP}(?:depends_on|uses_from_macos|on_\w+)\b')
DEPENDENCY_END = re.compile(rf'^(?:{TOP}def\s|end\s*$)')

# ---- 보간 ----
INTERPOLATION = re.compile(r'#\{(\w+)\}')


def assignment_pattern(variable: str) -> "re.Pattern[str]":
    """`<var> = "<value>"` 대입문."""
    return re.compile(rf'\b{re.escape(variable)}\s*=\s*"([^"]+)"')


# ---- 의존성 블록 문장 ----
DEPENDS_ON = re.compile(r'^\s*depends_on\s+"([^"]+)"')
USES_FROM_MACOS = re.compile(r'^\s*uses_from_macos\s+"([^"]+)"')
SINCE = re.compile(r'\bsince:\s*:(\w+)')
DEP_TYPE = re.compile(r'=>\s*(?::(\w+)|\[([^\]]*)\])')
SYMBOL = re.compile(r':(\w+)')
REQUIREMENT = re.compile(
    r'^\s*depends_on\s+(?::(\w+)(?:\s*=>\s*(.+?))?|(\w+):\s*(.+?))\s*(?:#.*)?$'
)
MODIFIER = re.compile(r'\s(if|unless)\s+(.+?)\s*(?:#.*)?$')
CLANG_VERSION = re.compile(r'DevelopmentTools\.clang_build_version\s*([<>]=?|==|!=)\s*(\d+)')

ON_PLATFORM = re.compile(r'^\s*on_(linux|macos|arm|intel)\s+do\b')
ON_SYSTEM = re.compile(r'^\s*on_system\s+(.+?)\s+do\b')
ON_SYSTEM_MACOS = re.compile(r'\bmacos:\s*:(\w+)')
ON_MACOS_VERSION = re.compile(
    r'^\s*on_(' + "|".join(MACOS_VERSIONS) + r')(?:\s+:or_(newer|older))?\s+do\b'
)
CONDITIONAL = re.compile(r'^\s*(if|unless)\s+(.+?)\s*(?:#.*)?$')
ELSE = re.compile(r'^\s*(?:else|elsif\b.*)\s*(?:#.*)?$')
SKIP_REGION = re.compile(r'^\s*(?:resource|patch)\b.*\bdo\s*(?:\|[^|]*\|)?\s*(?:#.*)?$')
DO_BLOCK = re.compile(r'\bdo\s*(?:\|[^|]*\|)?\s*(?:#.*)?$')
KEYWORD_BLOCK = re.compile(r'^\s*(?:if|unless|case|begin|while|until|for)\b')
BLOCK_END = re.compile(r'^\s*end\s*(?:#.*)?$')

# 조건식 -> 제한 토큰 (unless 일 때는 두 번째 값)
CONDITION_TOKENS = (
    (re.compile(r'Hardware::CPU\.arm\?'), "arm", "intel"),
    (re.compile(r'Hardware::CPU\.intel\?'), "intel", "arm"),
    (re.compile(r'OS\.mac\?'), "macos", "linux"),
    (re.compile(r'OS\.linux\?'), "linux", "macos"),
)

# ---- 저장소 호스트 ----
KNOWN_HOST_REPOSITORY = re.compile(
    r'^https://(github\.com|gitlab\.com|bitbucket\.org)/([\w.-]+)/([\w.-]+?)(?:\.git)?/?(?:\?.*)?$'
)
ARCHIVE_PATTERNS = (
    re.compile(r'^(https://github\.com/[\w.-]+/[\w.-]+)/(?:releases/download|archive|tree)/'),
    re.compile(r'^(https://gitlab\.com/[\w.-]+/[\w.-]+)/(?:-/archive|uploads|tree|-/tree)/'),
    re.compile(r'^(https://bitbucket\.org/[\w.-]+/[\w.-]+)/(?:downloads|get|tree)/'),
)
