"""shift-roster MCP Server.

Exposes the roster rule engine and the save-file tooling as MCP tools so
that AI agents can check rosters and inspect saved documents via the
Model Context Protocol.

Usage:
    python -m shift_roster.mcp                  # stdio mode
    fastmcp run shift_roster/mcp/server.py      # via CLI
"""

from __future__ import annotations

import json
import tempfile
from datetime import date
from pathlib import Path
from typing import Any

from fastmcp import FastMCP

from shift_roster.constraints.evaluation import evaluate_report
from shift_roster.constraints.policy import requirement_for
from shift_roster.constraints.registry import get_registry
from shift_roster.io.save_load import create_save_document, load_document, save_to_file
from shift_roster.io.snapshot import AutoSnapshot, FileSnapshotStore
from shift_roster.models.document import DocumentIssue, LoadResult
from shift_roster.schemas.migrations import migrate_to_latest
from shift_roster.schemas.validation import check_version_compatibility
from shift_roster.schemas.versioning import CURRENT_VERSION

# ---------------------------------------------------------------------------
# Server instance
# ---------------------------------------------------------------------------
mcp = FastMCP(
    name="shift-roster",
    instructions="""
    shift-roster 檢查每月排班表並管理排班存檔。

    基本流程:
    1. get_requirement → 查詢某日的人力需求
    2. evaluate_roster → 檢查排班違規（人數、週一上限、工作量平均）
    3. save_roster / save_snapshot → 存檔
    4. validate_document / load_snapshot → 讀檔並自動升級舊版本存檔
    """,
)

# ---------------------------------------------------------------------------
# Per-session state
# ---------------------------------------------------------------------------
_server_state: dict[str, Any] = {}


def _get_output_dir() -> Path:
    """Get or create the output directory for written files."""
    out = Path(_server_state.get("output_dir", tempfile.gettempdir())) / "shift_roster_output"
    out.mkdir(parents=True, exist_ok=True)
    return out


def _snapshot() -> AutoSnapshot:
    return AutoSnapshot(FileSnapshotStore(_get_output_dir() / "snapshots"))


def _issue_dict(issue: DocumentIssue) -> dict[str, Any]:
    return {
        "kind": issue.kind.value,
        "message": issue.message,
        "declared_version": issue.declared_version,
        "target_version": issue.target_version,
        "path": issue.path,
    }


def _load_result_dict(result: LoadResult) -> dict[str, Any]:
    return {
        "status": "ok" if result.success else "error",
        "success": result.success,
        "document": result.document.to_payload() if result.document else None,
        "errors": [_issue_dict(e) for e in result.errors],
        "warnings": [_issue_dict(w) for w in result.warnings],
    }


# ---------------------------------------------------------------------------
# Tool 1: list_rules
# ---------------------------------------------------------------------------
@mcp.tool
def list_rules() -> dict[str, Any]:
    """排班檢查規則的一覽。"""
    rules = [
        {
            "rule_id": r.rule_id,
            "name_zh": r.name_zh,
            "category": r.category,
            "description": r.description,
        }
        for r in get_registry().list_all()
    ]
    return {"rules": rules, "count": len(rules)}


# ---------------------------------------------------------------------------
# Tool 2: get_requirement
# ---------------------------------------------------------------------------
@mcp.tool
def get_requirement(day: str) -> dict[str, Any]:
    """查詢某日的人力需求。

    Args:
        day: 日期 (YYYY-MM-DD)

    Returns:
        早、午、晚班需求人數、每人上限與是否為休息日
    """
    try:
        target = date.fromisoformat(day)
    except ValueError:
        return {"status": "error", "message": f"日期格式必須為 YYYY-MM-DD: {day}"}
    req = requirement_for(target)
    return {"status": "ok", "date": day, **req.model_dump()}


# ---------------------------------------------------------------------------
# Tool 3: evaluate_roster
# ---------------------------------------------------------------------------
@mcp.tool
def evaluate_roster(
    month: str,
    workers: list[str],
    roster: dict[str, dict[str, list[str]]],
) -> dict[str, Any]:
    """檢查一個月的排班違規。

    Args:
        month: 目標月份 (YYYY-MM)
        workers: 人員名單（依顯示順序）
        roster: {"YYYY-MM-DD": {"姓名": ["早", "午", "晚", "加"]}}

    Returns:
        依日期排序的違規列表，最後為工作量平均的違規
    """
    try:
        report = evaluate_report(month, roster, workers)
    except ValueError as e:
        return {"status": "error", "message": str(e)}

    return {
        "status": "ok",
        "is_compliant": report.is_compliant,
        "violation_count": len(report.violations),
        "violations": [
            {
                "rule": v.rule_id,
                "message": v.message,
                "severity": v.severity.value,
                "worker": v.worker,
                "date": v.date,
            }
            for v in report.violations
        ],
    }


# ---------------------------------------------------------------------------
# Tool 4: validate_document
# ---------------------------------------------------------------------------
@mcp.tool
def validate_document(content: str) -> dict[str, Any]:
    """驗證存檔內容（JSON 文字），必要時自動升級到最新版本。

    Args:
        content: 存檔 JSON 文字

    Returns:
        驗證結果、升級後的存檔、錯誤與警告
    """
    return _load_result_dict(load_document(content))


# ---------------------------------------------------------------------------
# Tool 5: migrate_document
# ---------------------------------------------------------------------------
@mcp.tool
def migrate_document(content: str, target_version: str = CURRENT_VERSION) -> dict[str, Any]:
    """將存檔遷移到指定版本（不做完整驗證）。

    Args:
        content: 存檔 JSON 文字
        target_version: 目標版本

    Returns:
        遷移後資料與套用的遷移步驟
    """
    try:
        data = json.loads(content)
    except ValueError:
        return {"status": "error", "message": "檔案格式錯誤：無法解析 JSON"}
    if not isinstance(data, dict):
        return {"status": "error", "message": "存檔必須為 JSON 物件"}

    result = migrate_to_latest(data, target_version)
    if not result.success:
        return {"status": "error", "error": _issue_dict(result.error)}
    return {"status": "ok", "data": result.data, "steps": result.steps}


# ---------------------------------------------------------------------------
# Tool 6: check_compatibility
# ---------------------------------------------------------------------------
@mcp.tool
def check_compatibility(version: str) -> dict[str, Any]:
    """檢查存檔版本與目前版本是否相容。"""
    result = check_version_compatibility(version)
    return {
        "status": "ok",
        "version": version,
        "current_version": CURRENT_VERSION,
        "compatible": result.compatible,
        "message": result.message,
    }


# ---------------------------------------------------------------------------
# Tool 7: save_roster
# ---------------------------------------------------------------------------
@mcp.tool
def save_roster(
    month: str,
    workers: list[str],
    roster: dict[str, dict[str, list[str]]],
    notes: dict[str, str] | None = None,
    output_dir: str | None = None,
) -> dict[str, Any]:
    """將排班存成 JSON 檔。

    Args:
        month: 目標月份 (YYYY-MM)
        workers: 人員名單
        roster: 排班資料
        notes: 每日備註
        output_dir: 輸出目錄

    Returns:
        檔案路徑
    """
    if output_dir:
        _server_state["output_dir"] = output_dir
    try:
        document = create_save_document(month, workers, roster, notes or {})
    except ValueError as e:
        return {"status": "error", "message": str(e)}

    result = save_to_file(document, _get_output_dir())
    if not result.success:
        return {"status": "error", "message": result.error_message}
    return {"status": "ok", "path": result.path, "version": document.version}


# ---------------------------------------------------------------------------
# Tools 8-11: auto-snapshot slot
# ---------------------------------------------------------------------------
@mcp.tool
def save_snapshot(
    month: str,
    workers: list[str],
    roster: dict[str, dict[str, list[str]]],
    notes: dict[str, str] | None = None,
) -> dict[str, Any]:
    """將目前排班寫入自動存檔。"""
    saved = _snapshot().save_to_slot(month, workers, roster, notes or {})
    return {"status": "ok" if saved else "error", "saved": saved}


@mcp.tool
def load_snapshot() -> dict[str, Any]:
    """讀取自動存檔；損壞的自動存檔會被清除。"""
    return _load_result_dict(_snapshot().load_from_slot())


@mcp.tool
def snapshot_info() -> dict[str, Any]:
    """自動存檔的月份與時間（不做完整驗證）。"""
    return {"status": "ok", **_snapshot().peek_slot_metadata().model_dump()}


@mcp.tool
def clear_snapshot() -> dict[str, Any]:
    """清除自動存檔。"""
    _snapshot().clear_slot()
    return {"status": "ok"}


if __name__ == "__main__":
    mcp.run()
