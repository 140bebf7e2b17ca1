"""
Response body scanning for evidence that an injection payload was executed.

Each detector needs independent indicators before reporting, so a body that
merely echoes the payload back is not enough for SQL or command injection.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from contractfuzz.models import InjectionKind, VerdictStatus

logger = logging.getLogger(__name__)

SQL_ERROR_KEYWORDS = [
    "sql syntax", "syntax error", "unclosed quotation", "unterminated string",
    "unexpected end of sql", "invalid query", "database error", "db error",
    "query failed", "sql error", "warning: mysql", "warning: pg_", "warning: oci_",
    "supplied argument is not a valid", "microsoft sql", "sqlstate",
]

SCHEMA_KEYWORDS = [
    "information_schema", "sys.tables", "syscolumns", "pg_catalog", "pg_class",
    "sqlite_master", "mysql.user", "dual ", "table_schema", "column_name",
]


@dataclass
class IndicatorMatch:
    kind: InjectionKind
    title: str
    evidence: list[str]
    status: VerdictStatus = VerdictStatus.ERROR

    def describe(self) -> str:
        return f"{self.title}: {', '.join(self.evidence)}"


def _contains_any(body: str, keywords: list[str]) -> bool:
    return any(keyword in body for keyword in keywords)


# ── SQL ──────────────────────────────────────────────────────────────────────

def _has_union_select_with_data(body: str) -> bool:
    if not ("union" in body and "select" in body):
        return False
    has_from = "from " in body
    has_columns = "|" in body and "----" in body
    return has_from or has_columns or _contains_any(body, SCHEMA_KEYWORDS)


def scan_sql(body: str) -> IndicatorMatch | None:
    evidence = []
    if _has_union_select_with_data(body):
        evidence.append("UNION SELECT output")
    if _contains_any(body, SCHEMA_KEYWORDS):
        evidence.append("database schema information")
    if evidence and _contains_any(body, SQL_ERROR_KEYWORDS):
        evidence.append("SQL error response")

    if len(evidence) >= 2:
        return IndicatorMatch(InjectionKind.SQL, "SQL injection vulnerability detected", evidence)
    return None


# ── XSS ──────────────────────────────────────────────────────────────────────

def scan_xss(body: str) -> IndicatorMatch | None:
    reflected = (
        "<script>" in body
        or ("<img" in body and "onerror=" in body)
        or ("<svg" in body and "onload=" in body)
        or ("<iframe" in body and "javascript:" in body)
        or "onmouseover=" in body
        or "onfocus=" in body
    )
    if reflected:
        # Reflection is a validation concern, not proof of execution
        return IndicatorMatch(
            InjectionKind.XSS, "XSS payload reflected in response",
            ["dangerous markup in body"], VerdictStatus.WARN,
        )
    return None


# ── Command ──────────────────────────────────────────────────────────────────

COMMAND_EVIDENCE = {
    "passwd file content": lambda b: "root:" in b and "/bin/" in b,
    "id command output": lambda b: "uid=" in b and ("gid=" in b or "groups=" in b),
    "ls command output": lambda b: "total " in b and ("drwx" in b or "-rw-" in b),
    "uname command output": lambda b: ("linux" in b or "darwin" in b) and ("kernel" in b or "gnu" in b),
    "Windows dir command output": lambda b: "directory of" in b and "volume serial number" in b,
}


def scan_command(body: str) -> IndicatorMatch | None:
    evidence = [name for name, check in COMMAND_EVIDENCE.items() if check(body)]
    if len(evidence) >= 2:
        return IndicatorMatch(InjectionKind.COMMAND, "Command injection vulnerability detected", evidence)
    if evidence:
        return IndicatorMatch(InjectionKind.COMMAND, "Possible command injection vulnerability", evidence)
    return None


SCANNERS = {
    InjectionKind.SQL: scan_sql,
    InjectionKind.XSS: scan_xss,
    InjectionKind.COMMAND: scan_command,
}


def scan(kind: InjectionKind, body: str | None) -> IndicatorMatch | None:
    """Scan a response body for evidence of the given injection kind."""
    if not body:
        return None
    match = SCANNERS[kind](body.lower())
    if match:
        logger.debug("Indicator match (%s): %s", kind.value, match.describe())
    return match
