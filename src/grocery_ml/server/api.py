"""
Grocery ML Web API
==================
A FastAPI service for synthetic training runs and stored model management.

Endpoints:
    POST   /api/train    Train and save a model ({"action": "progress"} returns a snapshot)
    GET    /api/train    ?action=status|progress|models
    GET    /api/models   List models, or ?modelId=...&download=true for a ZIP
    POST   /api/models   Import a model bundle
    DELETE /api/models   ?modelId=...
"""

from typing import Any, Dict, List, Optional

from fastapi import FastAPI, HTTPException, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from pydantic import BaseModel, ConfigDict, Field

from grocery_ml import __version__
from grocery_ml.core.archive import bundle_to_payload
from grocery_ml.core.config import get_config
from grocery_ml.core.logger import get_logger
from grocery_ml.models.training import TrainingDataset
from grocery_ml.services.base import REASON_NOT_FOUND, REASON_VALIDATION, ServiceResult
from grocery_ml.services.factory import ServiceFactory

logger = get_logger(__name__)


# Request/response models
class TrainRequest(BaseModel):
    model_config = ConfigDict(extra="allow")

    action: Optional[str] = None
    training_id: Optional[str] = Field(default=None, alias="trainingId")
    classes: Optional[List[Any]] = None
    seed: Optional[int] = None


class ImportRequest(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True, protected_namespaces=())

    model_id: Optional[str] = Field(default=None, alias="modelId")
    model_name: Optional[str] = Field(default=None, alias="modelName")
    files: Optional[Dict[str, Any]] = None
    metadata: Optional[Dict[str, Any]] = None


class ErrorResponse(BaseModel):
    success: bool = False
    error: str
    detail: Optional[str] = None


def status_code_for(result: ServiceResult) -> int:
    """HTTP status for a failed service result."""
    if result.reason == REASON_VALIDATION:
        return 400
    if result.reason == REASON_NOT_FOUND:
        return 404
    return 500


def unwrap(result: ServiceResult) -> Any:
    """Return result data, raising HTTPException when the result failed."""
    if not result.success:
        raise HTTPException(status_code=status_code_for(result), detail=result.error)
    return result.data


def create_app(factory: Optional[ServiceFactory] = None) -> FastAPI:
    """
    Build the API application.

    Args:
        factory: Services to serve. If None, a ServiceFactory is created from
            the global configuration on first request.
    """
    app = FastAPI(
        title="Grocery ML API",
        description="Synthetic image classifier training and model storage",
        version=__version__,
    )
    app.state.factory = factory

    app.add_middleware(
        CORSMiddleware,
        allow_origins=get_config().get("server", "cors_origins", ["*"]),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    def services() -> ServiceFactory:
        if app.state.factory is None:
            app.state.factory = ServiceFactory()
        return app.state.factory

    def progress_response(training_id: Optional[str]) -> Dict[str, Any]:
        progress = unwrap(services().training.get_progress(training_id))
        return {"success": True, **progress.to_dict()}

    @app.get("/")
    async def root():
        """API information."""
        return {
            "name": "Grocery ML API",
            "version": __version__,
            "endpoints": {
                "/api/train": "POST - Train a model; GET - status, progress, models",
                "/api/models": "GET - List or download; POST - Import; DELETE - Remove",
            },
        }

    @app.post("/api/train")
    async def train(body: TrainRequest):
        """Validate, train, and save a model."""
        if body.action == "progress":
            return progress_response(body.training_id)

        dataset = TrainingDataset.from_dict(body.model_dump())
        logger.info(
            f"Training request: {dataset.num_classes} classes, {dataset.total_images} images"
        )

        outcome = unwrap(await services().training.train(dataset, seed=body.seed))
        logger.info(
            f"Training complete: {outcome.model_id} "
            f"accuracy={outcome.metrics.accuracy} epochs={outcome.metrics.epoch}"
        )

        return {
            "success": True,
            "modelId": outcome.model_id,
            "metrics": outcome.metrics.to_dict(),
            "history": outcome.history.to_dict(),
            "modelData": bundle_to_payload(outcome.bundle),
            "message": "Model trained successfully",
        }

    @app.get("/api/train")
    async def train_info(
        action: Optional[str] = None,
        training_id: Optional[str] = Query(default=None, alias="trainingId"),
    ):
        """Training system status, a progress snapshot, or the stored model list."""
        if action == "progress":
            return progress_response(training_id)

        if action == "models":
            entries = unwrap(services().models.list_model_entries())
            return {"success": True, "models": entries}

        status = unwrap(services().storage.get_status())
        return {"success": True, **status, "message": "Training system ready"}

    @app.get("/api/models")
    async def get_models(
        model_id: Optional[str] = Query(default=None, alias="modelId"),
        download: Optional[str] = None,
    ):
        """List stored models, or fetch one as JSON or a ZIP download."""
        if not model_id:
            infos = unwrap(services().models.list_models())
            return {"success": True, "models": [info.to_dict() for info in infos]}

        export = unwrap(services().export.export_model(model_id, download=download == "true"))
        if export.is_archive:
            return Response(
                content=export.archive,
                media_type=export.content_type,
                headers={"Content-Disposition": export.content_disposition},
            )
        return {"success": True, "model": export.payload}

    @app.post("/api/models")
    async def import_model(body: ImportRequest):
        """Save a model bundle supplied by the client."""
        request = body.model_dump(by_alias=True, exclude_none=True)
        bundle = unwrap(services().models.import_model(request))
        return {
            "success": True,
            "message": "Model saved successfully",
            "modelId": bundle.model_id,
        }

    @app.delete("/api/models")
    async def delete_model(model_id: Optional[str] = Query(default=None, alias="modelId")):
        """Delete a stored model."""
        if not model_id:
            raise HTTPException(status_code=400, detail="modelId is required")

        unwrap(services().models.delete_model(model_id))
        return {"success": True, "message": "Model deleted successfully"}

    # Error handlers
    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content=ErrorResponse(error=str(exc.detail)).model_dump(exclude_none=True),
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        logger.error(f"Unhandled exception on {request.url.path}: {exc}")
        return JSONResponse(
            status_code=500,
            content=ErrorResponse(error=str(exc) or "Internal server error").model_dump(
                exclude_none=True
            ),
        )

    return app


app = create_app()
