from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from escola.dependencies import get_current_identity, get_store, require_admin
from escola.models import ResourceType
from escola.schemas import Booking, Identity, Professor, Resource
from escola.store import DirectoryStore

router = APIRouter(tags=["directory"])


@router.get("/professors", response_model=List[Professor])
def list_professors(
    _: Identity = Depends(require_admin),
    store: DirectoryStore = Depends(get_store),
) -> List[Professor]:
    return store.list_professors()


@router.get("/resources", response_model=List[Resource])
def list_resources(
    resource_type: Optional[ResourceType] = Query(None, alias="type"),
    store: DirectoryStore = Depends(get_store),
) -> List[Resource]:
    if resource_type is not None:
        return store.list_resources_by_type(resource_type)
    return store.list_resources()


@router.get("/resources/{resource_id}", response_model=Resource)
def get_resource(resource_id: str, store: DirectoryStore = Depends(get_store)) -> Resource:
    resource = store.find_resource_by_id(resource_id)
    if resource is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Recurso não encontrado")
    return resource


@router.get("/resources/{resource_id}/bookings", response_model=List[Booking])
def resource_bookings(
    resource_id: str,
    _: Identity = Depends(get_current_identity),
    store: DirectoryStore = Depends(get_store),
) -> List[Booking]:
    if store.find_resource_by_id(resource_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Recurso não encontrado")
    return store.find_bookings_by_resource(resource_id)
