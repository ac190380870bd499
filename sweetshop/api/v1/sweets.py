import logging
from fastapi import APIRouter, Depends, HTTPException, Request, status
from sweetshop.api.deps import get_admin, get_identity
from sweetshop.core.errors import CatalogError
from sweetshop.core.security import Identity
from sweetshop.schemas.response import SuccessResponse
from sweetshop.schemas.sweet import QuantityRequest, SearchResult, SweetRequest, serialize_sweet
from sweetshop.services import catalog_service, inventory_service, search_service
from typing import Optional
from uuid import UUID

router = APIRouter()
logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
log = logging.getLogger("uvicorn")


@router.post("", status_code=status.HTTP_201_CREATED, response_model=SuccessResponse)
async def create_sweet_endpoint(payload: SweetRequest, identity: Identity = Depends(get_admin)):
    """Adds a sweet to the catalog (admin)."""
    try:
        sweet = await catalog_service.create_sweet(payload.model_dump(by_alias=True), identity)
        return SuccessResponse(message="Sweet created successfully", data={"sweet": serialize_sweet(sweet)})
    except CatalogError:
        raise
    except Exception as e:
        log.error(f"Error creating sweet: {e}")
        raise HTTPException(status_code=500, detail="Server error")


@router.get("", response_model=SuccessResponse)
async def list_sweets_endpoint():
    """Unfiltered catalog listing, newest first."""
    try:
        sweets = await catalog_service.list_sweets()
        return SuccessResponse(data={"sweets": [serialize_sweet(s) for s in sweets]})
    except CatalogError:
        raise
    except Exception as e:
        log.error(f"Error listing sweets: {e}")
        raise HTTPException(status_code=500, detail="Server error")


# Declared before /{sweet_id} so "search" is never parsed as an id
@router.get("/search", response_model=SuccessResponse)
async def search_sweets_endpoint(request: Request):
    """
    Filters the catalog. Accepts q|keywords, category, minprice|minPrice,
    maxprice|maxPrice and instock; at least one is required.
    """
    try:
        sweets, total = await search_service.search(request.query_params)
        data = SearchResult(sweets=[serialize_sweet(s) for s in sweets], total=total)
        return SuccessResponse(data=data.model_dump(by_alias=True, mode="json"))
    except CatalogError:
        raise
    except Exception as e:
        log.error(f"Error searching sweets: {e}")
        raise HTTPException(status_code=500, detail="Server error")


@router.get("/{sweet_id}", response_model=SuccessResponse)
async def get_sweet_endpoint(sweet_id: UUID):
    try:
        sweet = await catalog_service.get_sweet(sweet_id)
        return SuccessResponse(data={"sweet": serialize_sweet(sweet)})
    except CatalogError:
        raise
    except Exception as e:
        log.error(f"Error fetching sweet {sweet_id}: {e}")
        raise HTTPException(status_code=500, detail="Server error")


@router.put("/{sweet_id}", response_model=SuccessResponse)
async def update_sweet_endpoint(sweet_id: UUID, payload: SweetRequest, identity: Identity = Depends(get_admin)):
    """Replaces all six editable fields of a sweet (admin)."""
    try:
        sweet = await catalog_service.update_sweet(sweet_id, payload.model_dump(by_alias=True), identity)
        return SuccessResponse(message="Sweet updated successfully", data={"sweet": serialize_sweet(sweet)})
    except CatalogError:
        raise
    except Exception as e:
        log.error(f"Error updating sweet {sweet_id}: {e}")
        raise HTTPException(status_code=500, detail="Server error")


@router.delete("/{sweet_id}", response_model=SuccessResponse)
async def delete_sweet_endpoint(sweet_id: UUID, identity: Identity = Depends(get_admin)):
    try:
        await catalog_service.delete_sweet(sweet_id, identity)
        return SuccessResponse(message="Sweet deleted successfully")
    except CatalogError:
        raise
    except Exception as e:
        log.error(f"Error deleting sweet {sweet_id}: {e}")
        raise HTTPException(status_code=500, detail="Server error")


@router.post("/{sweet_id}/purchase", response_model=SuccessResponse)
async def purchase_sweet_endpoint(
    sweet_id: UUID,
    payload: Optional[QuantityRequest] = None,
    identity: Identity = Depends(get_identity),
):
    """
    Buys `quantity` units (default 1). Any logged-in user.
    Fails with 400 when stock is short or the sweet does not exist.
    """
    quantity = payload.quantity if payload else None
    try:
        sweet = await inventory_service.purchase(sweet_id, quantity, identity)
        return SuccessResponse(message="Purchase successful", data={"sweet": serialize_sweet(sweet)})
    except CatalogError:
        raise
    except Exception as e:
        log.error(f"Error purchasing sweet {sweet_id}: {e}")
        raise HTTPException(status_code=500, detail="Server error")


@router.post("/{sweet_id}/restock", response_model=SuccessResponse)
async def restock_sweet_endpoint(
    sweet_id: UUID,
    payload: Optional[QuantityRequest] = None,
    identity: Identity = Depends(get_admin),
):
    """Adds stock to a sweet (admin)."""
    quantity = payload.quantity if payload else None
    try:
        sweet = await inventory_service.restock(sweet_id, quantity, identity)
        return SuccessResponse(message="Restocked", data={"sweet": serialize_sweet(sweet)})
    except CatalogError:
        raise
    except Exception as e:
        log.error(f"Error restocking sweet {sweet_id}: {e}")
        raise HTTPException(status_code=500, detail="Server error")
