"""
Service catalog routes
Billable services and categories
"""

from fastapi import APIRouter, HTTPException, Request
import structlog

from gamehouse.errors import GameHouseError
from gamehouse.messages import translate
from gamehouse.models.catalog import CategoryCreate, CategoryUpdate, ServiceCreate, ServiceUpdate
from gamehouse.services.catalog_service import CatalogService
from gamehouse.utils.database import serialize_document
from gamehouse.utils.dependencies import CurrentOperator, DatabaseDep, set_activity_details

logger = structlog.get_logger(__name__)

services_router = APIRouter()
categories_router = APIRouter()


# ===== SERVICES =====

@services_router.get("", response_model=dict)
async def list_services(db: DatabaseDep, operator: CurrentOperator):
    """List active services, newest first"""
    try:
        services = await CatalogService(db).list_services()
        return {"success": True, "services": serialize_document(services)}
    except Exception as e:
        logger.error("Failed to list services", error=str(e), exc_info=True)
        raise HTTPException(status_code=500, detail=translate("internal_error"))


@services_router.post("", response_model=dict, status_code=201)
async def create_service(service_data: ServiceCreate, request: Request, db: DatabaseDep, operator: CurrentOperator):
    """Create a service"""
    try:
        service = await CatalogService(db).create_service(service_data)
        set_activity_details(request, resource_id=str(service["_id"]), name=service["name"])
        return {"success": True, "service": serialize_document(service)}
    except GameHouseError:
        raise
    except Exception as e:
        logger.error("Failed to create service", error=str(e), exc_info=True)
        raise HTTPException(status_code=500, detail=translate("internal_error"))


@services_router.get("/{service_id}", response_model=dict)
async def get_service(service_id: str, db: DatabaseDep, operator: CurrentOperator):
    service = await CatalogService(db).get_service(service_id)
    return {"success": True, "service": serialize_document(service)}


@services_router.put("/{service_id}", response_model=dict)
async def update_service(service_id: str, update_data: ServiceUpdate, db: DatabaseDep, operator: CurrentOperator):
    """Update a service"""
    try:
        service = await CatalogService(db).update_service(service_id, update_data)
        return {"success": True, "service": serialize_document(service)}
    except GameHouseError:
        raise
    except Exception as e:
        logger.error("Failed to update service", service_id=service_id, error=str(e), exc_info=True)
        raise HTTPException(status_code=500, detail=translate("internal_error"))


@services_router.delete("/{service_id}", response_model=dict)
async def delete_service(service_id: str, request: Request, db: DatabaseDep, operator: CurrentOperator):
    """Delete a service"""
    try:
        service = await CatalogService(db).delete_service(service_id)
        set_activity_details(request, name=service["name"])
        return {"success": True, "message": translate("service_deleted")}
    except GameHouseError:
        raise
    except Exception as e:
        logger.error("Failed to delete service", service_id=service_id, error=str(e), exc_info=True)
        raise HTTPException(status_code=500, detail=translate("internal_error"))


# ===== CATEGORIES =====

@categories_router.get("", response_model=dict)
async def list_categories(db: DatabaseDep, operator: CurrentOperator):
    try:
        categories = await CatalogService(db).list_categories()
        return {"success": True, "categories": serialize_document(categories)}
    except Exception as e:
        logger.error("Failed to list categories", error=str(e), exc_info=True)
        raise HTTPException(status_code=500, detail=translate("internal_error"))


@categories_router.post("", response_model=dict, status_code=201)
async def create_category(category_data: CategoryCreate, request: Request, db: DatabaseDep, operator: CurrentOperator):
    """Create a category; names are unique"""
    try:
        category = await CatalogService(db).create_category(category_data)
        set_activity_details(request, resource_id=str(category["_id"]), name=category["name"])
        return {"success": True, "category": serialize_document(category)}
    except GameHouseError:
        raise
    except Exception as e:
        logger.error("Failed to create category", error=str(e), exc_info=True)
        raise HTTPException(status_code=500, detail=translate("internal_error"))


@categories_router.put("/{category_id}", response_model=dict)
async def update_category(category_id: str, update_data: CategoryUpdate, db: DatabaseDep, operator: CurrentOperator):
    try:
        category = await CatalogService(db).update_category(category_id, update_data)
        return {"success": True, "category": serialize_document(category)}
    except GameHouseError:
        raise
    except Exception as e:
        logger.error("Failed to update category", category_id=category_id, error=str(e), exc_info=True)
        raise HTTPException(status_code=500, detail=translate("internal_error"))


@categories_router.delete("/{category_id}", response_model=dict)
async def delete_category(category_id: str, db: DatabaseDep, operator: CurrentOperator):
    """Delete a category that no service uses"""
    try:
        await CatalogService(db).delete_category(category_id)
        return {"success": True, "message": translate("category_deleted")}
    except GameHouseError:
        raise
    except Exception as e:
        logger.error("Failed to delete category", category_id=category_id, error=str(e), exc_info=True)
        raise HTTPException(status_code=500, detail=translate("internal_error"))
