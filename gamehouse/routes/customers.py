"""
Customer routes
"""

from typing import Optional

from fastapi import APIRouter, HTTPException, Query, Request
from fastapi.responses import JSONResponse
import structlog

from gamehouse.errors import GameHouseError
from gamehouse.messages import translate
from gamehouse.models.customer import CustomerCreate, CustomerUpdate
from gamehouse.services.customer_service import CustomerService
from gamehouse.utils.database import serialize_document
from gamehouse.utils.dependencies import CurrentOperator, DatabaseDep, set_activity_details

logger = structlog.get_logger(__name__)

router = APIRouter()


@router.get("", response_model=dict)
async def list_customers(
    db: DatabaseDep,
    operator: CurrentOperator,
    page: Optional[int] = Query(None, ge=1, description="Page number"),
    limit: Optional[int] = Query(None, ge=1, le=100, description="Items per page"),
    search: Optional[str] = Query(None, description="Match first name, last name or phone")
):
    """List customers, all by name or paginated newest first"""
    try:
        return await CustomerService(db).list_customers(page=page, limit=limit, search=search)
    except GameHouseError:
        raise
    except Exception as e:
        logger.error("Failed to list customers", error=str(e), exc_info=True)
        raise HTTPException(status_code=500, detail=translate("internal_error"))


@router.post("", response_model=dict, status_code=201)
async def create_customer(
    customer_data: CustomerCreate,
    request: Request,
    db: DatabaseDep,
    operator: CurrentOperator
):
    """Create a customer"""
    try:
        customer = await CustomerService(db).create_customer(customer_data)
        set_activity_details(
            request,
            resource_id=str(customer["_id"]),
            customer_name=f"{customer['first_name']} {customer['last_name']}"
        )
        return {"success": True, "customer": serialize_document(customer)}
    except GameHouseError:
        raise
    except Exception as e:
        logger.error("Failed to create customer", error=str(e), exc_info=True)
        # Raw error text is returned in details on this endpoint only
        return JSONResponse(
            status_code=500,
            content={
                "error": True,
                "message": translate("customer_create_failed"),
                "details": str(e),
                "status_code": 500
            }
        )


@router.get("/{customer_id}", response_model=dict)
async def get_customer(customer_id: str, db: DatabaseDep, operator: CurrentOperator):
    """Get customer details"""
    customer = await CustomerService(db).get_customer(customer_id)
    return {"success": True, "customer": serialize_document(customer)}


@router.put("/{customer_id}", response_model=dict)
async def update_customer(
    customer_id: str,
    update_data: CustomerUpdate,
    db: DatabaseDep,
    operator: CurrentOperator
):
    """Update customer name or phone"""
    try:
        customer = await CustomerService(db).update_customer(customer_id, update_data)
        return {"success": True, "customer": serialize_document(customer)}
    except GameHouseError:
        raise
    except Exception as e:
        logger.error("Failed to update customer", customer_id=customer_id, error=str(e), exc_info=True)
        raise HTTPException(status_code=500, detail=translate("internal_error"))


@router.delete("/{customer_id}", response_model=dict)
async def delete_customer(customer_id: str, request: Request, db: DatabaseDep, operator: CurrentOperator):
    """Delete a customer"""
    try:
        customer = await CustomerService(db).delete_customer(customer_id)
        set_activity_details(request, phone=customer.get("phone"))
        return {"success": True, "message": translate("customer_deleted")}
    except GameHouseError:
        raise
    except Exception as e:
        logger.error("Failed to delete customer", customer_id=customer_id, error=str(e), exc_info=True)
        raise HTTPException(status_code=500, detail=translate("internal_error"))
