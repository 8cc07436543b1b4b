"""
Catalog API - FastAPI routers for clients, materials and inks.
"""
from dataclasses import asdict
from typing import Literal, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from ..state import AppState
from .common import call_service, found, page_response
from .state import get_state

router = APIRouter(prefix="/api", tags=["catalog"])


# Pydantic models for API
class ClientCreate(BaseModel):
    """Request model for creating a client."""
    name: str = Field(min_length=1)
    document: Optional[str] = None
    contact: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    notes: Optional[str] = None


class ClientUpdate(BaseModel):
    name: Optional[str] = None
    document: Optional[str] = None
    contact: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    notes: Optional[str] = None


class MaterialCreate(BaseModel):
    """Request model for creating a material."""
    name: str = Field(min_length=1)
    unit: Literal["m", "m2"] = "m"
    cost_per_unit: float = Field(ge=0)
    supplier: Optional[str] = None
    stock: Optional[float] = None


class MaterialUpdate(BaseModel):
    name: Optional[str] = None
    unit: Optional[Literal["m", "m2"]] = None
    cost_per_unit: Optional[float] = Field(default=None, ge=0)
    supplier: Optional[str] = None
    stock: Optional[float] = None


class InkCreate(BaseModel):
    """Request model for creating an ink."""
    name: str = Field(min_length=1)
    cost_per_liter: float = Field(ge=0)
    supplier: Optional[str] = None
    stock_ml: Optional[float] = None


class InkUpdate(BaseModel):
    name: Optional[str] = None
    cost_per_liter: Optional[float] = Field(default=None, ge=0)
    supplier: Optional[str] = None
    stock_ml: Optional[float] = None


# Clients

@router.get("/clients")
async def list_clients(page: int = 1, limit: int = 10, search: str = "", state: AppState = Depends(get_state)):
    return page_response(state.catalog.list_clients(page, limit, search))


@router.get("/clients/{client_id}")
async def get_client(client_id: str, state: AppState = Depends(get_state)):
    return found(state.catalog.get_client(client_id), "Client", client_id)


@router.post("/clients", status_code=201)
async def create_client(data: ClientCreate, state: AppState = Depends(get_state)):
    return asdict(call_service(state.catalog.create_client, data.model_dump()))


@router.put("/clients/{client_id}")
async def update_client(client_id: str, data: ClientUpdate, state: AppState = Depends(get_state)):
    return asdict(call_service(state.catalog.update_client, client_id, data.model_dump(exclude_unset=True)))


@router.delete("/clients/{client_id}")
async def delete_client(client_id: str, state: AppState = Depends(get_state)):
    call_service(state.catalog.delete_client, client_id)
    return {"success": True, "message": f"Client '{client_id}' deleted"}


# Materials

@router.get("/materials")
async def list_materials(page: int = 1, limit: int = 10, search: str = "", state: AppState = Depends(get_state)):
    return page_response(state.catalog.list_materials(page, limit, search))


@router.get("/materials/{material_id}")
async def get_material(material_id: str, state: AppState = Depends(get_state)):
    return found(state.catalog.get_material(material_id), "Material", material_id)


@router.post("/materials", status_code=201)
async def create_material(data: MaterialCreate, state: AppState = Depends(get_state)):
    return asdict(call_service(state.catalog.create_material, data.model_dump()))


@router.put("/materials/{material_id}")
async def update_material(material_id: str, data: MaterialUpdate, state: AppState = Depends(get_state)):
    return asdict(call_service(state.catalog.update_material, material_id, data.model_dump(exclude_unset=True)))


@router.delete("/materials/{material_id}")
async def delete_material(material_id: str, state: AppState = Depends(get_state)):
    call_service(state.catalog.delete_material, material_id)
    return {"success": True, "message": f"Material '{material_id}' deleted"}


# Inks

@router.get("/inks")
async def list_inks(page: int = 1, limit: int = 10, search: str = "", state: AppState = Depends(get_state)):
    return page_response(state.catalog.list_inks(page, limit, search))


@router.get("/inks/{ink_id}")
async def get_ink(ink_id: str, state: AppState = Depends(get_state)):
    return found(state.catalog.get_ink(ink_id), "Ink", ink_id)


@router.post("/inks", status_code=201)
async def create_ink(data: InkCreate, state: AppState = Depends(get_state)):
    return asdict(call_service(state.catalog.create_ink, data.model_dump()))


@router.put("/inks/{ink_id}")
async def update_ink(ink_id: str, data: InkUpdate, state: AppState = Depends(get_state)):
    return asdict(call_service(state.catalog.update_ink, ink_id, data.model_dump(exclude_unset=True)))


@router.delete("/inks/{ink_id}")
async def delete_ink(ink_id: str, state: AppState = Depends(get_state)):
    call_service(state.catalog.delete_ink, ink_id)
    return {"success": True, "message": f"Ink '{ink_id}' deleted"}
