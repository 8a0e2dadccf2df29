from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any, Callable, TypeVar

from fastapi import Body, Depends, FastAPI, Header, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from starlette.exceptions import HTTPException

from healthsync_core import (
    ChatPipelineError,
    CompletionProvider,
    CreatorLineagePolicy,
    Identity,
    InternalError,
    InvalidInput,
    PatientChatOrchestrator,
    PatientRecord,
    ServiceUnavailable,
    Settings,
    TokenVerifier,
    bearer_token,
)
from healthsync_core.config import bootstrap_local_env
from healthsync_tools import DiseaseInfoService, ScholarSearch
from records import PatientStore, SQLiteRecordDB, StoreUnavailableError

bootstrap_local_env()

logger = logging.getLogger("healthsync")


class PatientChatPayload(BaseModel):
    patientId: Any = None
    question: Any = None


class DiseaseInfoPayload(BaseModel):
    icdCode: Any = None
    diseaseName: Any = None


class ResearchPapersPayload(BaseModel):
    query: Any = None


class PatientCreatePayload(BaseModel):
    name: Any = None
    age: Any = None
    icd11: Any = None


class HealthSyncApp:
    """Process-wide resources, built once at import and closed on shutdown."""

    def __init__(self, settings: Settings | None = None) -> None:
        self.settings = settings or Settings.from_env()
        logging.basicConfig(
            level=getattr(logging, self.settings.log_level, logging.INFO),
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )
        self.verifier = TokenVerifier(self.settings.jwt_secret, self.settings.jwt_algorithms)
        self.policy = CreatorLineagePolicy()
        self.db: SQLiteRecordDB | None = None
        try:
            self.db = SQLiteRecordDB(self.settings.db_path)
        except StoreUnavailableError:
            logger.error("patient store could not be opened; patient routes will return 503")
        self.patients = PatientStore(self.db) if self.db is not None else None
        self.provider = CompletionProvider(
            api_key=self.settings.groq_api_key,
            base_url=self.settings.groq_base_url,
            model=self.settings.chat_model,
            timeout_seconds=self.settings.chat_timeout_seconds,
        )
        self.orchestrator = PatientChatOrchestrator(
            verifier=self.verifier,
            patients=self,
            provider=self.provider,
            policy=self.policy,
        )
        self.disease_info = DiseaseInfoService(self.provider)
        self.scholar = ScholarSearch(api_key=self.settings.serpapi_key)

    def get(self, patient_id: str) -> PatientRecord | None:
        return self.require_patients().get(patient_id)

    def require_patients(self) -> PatientStore:
        if self.patients is None:
            raise StoreUnavailableError("Patient store is not open.")
        return self.patients

    def close(self) -> None:
        self.provider.close()
        self.scholar.close()
        if self.patients is not None:
            self.patients.close()


container = HealthSyncApp()


@asynccontextmanager
async def lifespan(_app: FastAPI):
    yield
    container.close()


app = FastAPI(title="HealthSync Backend", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=list(container.settings.allowed_origins),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(ChatPipelineError)
async def chat_pipeline_error_handler(_request: Request, exc: ChatPipelineError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.as_body())


@app.exception_handler(HTTPException)
async def http_error_handler(_request: Request, exc: HTTPException) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"error": str(exc.detail)})


@app.exception_handler(RequestValidationError)
async def validation_error_handler(_request: Request, _exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(status_code=400, content={"error": "Invalid request body"})


def require_identity(authorization: str | None = Header(default=None)) -> Identity:
    return container.verifier.verify_header(authorization)


PayloadT = TypeVar("PayloadT", bound=BaseModel)


def read_payload(model: type[PayloadT], body: Any) -> PayloadT:
    # Missing or non-object bodies read as all fields absent.
    return model.model_validate(body if isinstance(body, dict) else {})


def _store_guard(action: str, func: Callable[[], Any]) -> Any:
    try:
        return func()
    except StoreUnavailableError as exc:
        logger.error("%s: patient store unavailable: %s", action, exc)
        raise ServiceUnavailable("Database unavailable") from exc


@app.get("/health")
def health() -> dict[str, Any]:
    return {"ok": True}


@app.post("/chat")
@app.post("/api/groq/patient-chat")
def patient_chat(body: Any = Body(default=None), authorization: str | None = Header(default=None)):
    payload = read_payload(PatientChatPayload, body)
    answer = container.orchestrator.handle(
        bearer_token(authorization),
        payload.patientId,
        payload.question,
    )
    return answer.as_envelope()


@app.post("/api/groq/disease-info")
def disease_info(body: Any = Body(default=None), _identity: Identity = Depends(require_identity)):
    payload = read_payload(DiseaseInfoPayload, body)
    try:
        info = container.disease_info.lookup(icd_code=payload.icdCode, disease_name=payload.diseaseName)
    except ChatPipelineError:
        raise
    except Exception as exc:
        logger.exception("disease info lookup failed")
        raise InternalError("Failed to generate disease information") from exc
    return {"success": True, "data": info}


@app.post("/api/groq/research-papers")
def research_papers(body: Any = Body(default=None), _identity: Identity = Depends(require_identity)):
    payload = read_payload(ResearchPapersPayload, body)
    try:
        papers = container.scholar.search(payload.query)
    except ChatPipelineError:
        raise
    except Exception as exc:
        logger.exception("research paper search failed")
        raise InternalError("Failed to fetch research papers") from exc
    return {"success": True, "papers": papers}


@app.post("/api/patients", status_code=201)
def create_patient(body: Any = Body(default=None), identity: Identity = Depends(require_identity)):
    payload = read_payload(PatientCreatePayload, body)
    if not payload.name or payload.age in (None, "") or not payload.icd11:
        raise InvalidInput("name, age and icd11 required")
    try:
        age = int(float(payload.age))
    except (TypeError, ValueError) as exc:
        raise InvalidInput("name, age and icd11 required") from exc
    record = _store_guard(
        "create patient",
        lambda: container.require_patients().create(
            name=str(payload.name).strip(),
            age=age,
            icd11=str(payload.icd11).strip(),
            created_by=identity.subject,
        ),
    )
    logger.info("patient created id=%s", record.patient_id)
    return record.as_summary()


@app.get("/api/patients")
def list_patients(identity: Identity = Depends(require_identity)):
    records = _store_guard("list patients", lambda: container.require_patients().list_recent(limit=50))
    return {
        "patients": [
            record.as_summary() for record in records if container.policy.can_access(identity, record)
        ]
    }
