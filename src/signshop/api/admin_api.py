"""
Admin API - reports, audit log, shop settings and backups.
"""
from dataclasses import asdict
from datetime import date
from typing import Literal, Optional

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import Response
from pydantic import BaseModel, Field

from ..services.plans import get_plan_limits, is_feature_available
from ..state import AppState
from .common import call_service, page_response
from .state import get_state

router = APIRouter(prefix="/api", tags=["admin"])


class SettingsUpdate(BaseModel):
    """Request model for shop settings; only provided fields change."""
    company_name: Optional[str] = Field(default=None, min_length=1)
    company_logo: Optional[str] = None
    locale: Optional[Literal["pt-BR", "en"]] = None
    currency: Optional[Literal["BRL", "USD"]] = None
    default_markup: Optional[float] = Field(default=None, ge=0)
    default_unit: Optional[Literal["m", "m2"]] = None
    tax_percent: Optional[float] = Field(default=None, ge=0, le=100)
    theme: Optional[Literal["light", "dark", "system"]] = None
    plan: Optional[Literal["free", "pro"]] = None


# Reports

@router.get("/reports/dashboard")
async def dashboard(state: AppState = Depends(get_state)):
    return asdict(state.reports.dashboard_metrics())


@router.get("/reports/summary")
async def summary(start: Optional[date] = None, end: Optional[date] = None, state: AppState = Depends(get_state)):
    reports = state.reports
    return {
        "summary": asdict(reports.summary(start, end)),
        "revenue_by_month": reports.revenue_by_month(start, end),
        "top_clients": reports.top_clients(5, start, end),
        "status_distribution": reports.status_distribution(start, end),
    }


@router.get("/reports/export")
async def export_report(start: Optional[date] = None, end: Optional[date] = None, state: AppState = Depends(get_state)):
    csv_text = call_service(state.reports.export_csv, start, end, state.preferences.locale)
    return Response(
        content=csv_text,
        media_type="text/csv",
        headers={"Content-Disposition": "attachment; filename=service-report.csv"},
    )


@router.get("/audit")
async def audit_logs(page: int = 1, limit: int = 10, state: AppState = Depends(get_state)):
    return page_response(state.audit.list_logs(page, limit))


# Settings and plan

@router.get("/settings")
async def get_shop_settings(state: AppState = Depends(get_state)):
    shop = state.settings.shop
    return {
        "shop": asdict(shop),
        "preferences": asdict(state.preferences),
        "limits": {k: (None if v == float("inf") else v) for k, v in get_plan_limits(shop.plan).items()},
    }


@router.put("/settings")
async def update_shop_settings(updates: SettingsUpdate, state: AppState = Depends(get_state)):
    changes = updates.model_dump(exclude_unset=True)
    plan = changes.pop("plan", None)
    shop = state.settings.save_shop(changes)
    if plan:
        state.set_plan(plan)
    if "locale" in changes:
        state.update(locale=shop.locale, currency=shop.currency)
    return asdict(state.settings.shop)


# Backups

@router.get("/backup")
async def export_backup(state: AppState = Depends(get_state)):
    return state.store.export_backup()


@router.post("/backup")
async def import_backup(data: dict, state: AppState = Depends(get_state)):
    if not is_feature_available("local_backup", state.settings.shop.plan):
        raise HTTPException(status_code=403, detail="Backups are not available on this plan")
    call_service(state.store.import_backup, data)
    return {"success": True, "message": "Backup imported"}
