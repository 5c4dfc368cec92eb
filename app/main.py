import json
import logging
import threading
import time
from typing import Any, Dict, Optional

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse

from ethicaltrace import (
    ConsumerVerification,
    EpochClock,
    ErrorKind,
    LaborCertificationStore,
    ManualClock,
    MaterialTracking,
    Outcome,
    SupplierVerification,
    ValidationError,
)
from ethicaltrace.logging_config import audit_log, configure_logging, set_request_id

from . import config
from .models import (
    AdvanceClockRequest,
    CertifyEntityRequest,
    EthicalStandardRequest,
    LaborComplianceRequest,
    LaborStandardRequest,
    OpenVerificationRequest,
    ProductVerificationRequest,
    RegisterCertificationRequest,
    RegisterMaterialRequest,
    RegisterSupplierRequest,
    RespondRequest,
    ReviewRequest,
    SupplierComplianceRequest,
    TransferAdminRequest,
    VerifySupplierRequest,
)
from .rate_limit import RateLimiter
from .security import CallerAuthError, authenticate_caller

logger = logging.getLogger("ethicaltrace.service")

app = FastAPI(title="EthicalTrace Compliance Registry")

STATUS_BY_KIND = {
    ErrorKind.NOT_AUTHORIZED: 403,
    ErrorKind.ALREADY_EXISTS: 409,
    ErrorKind.ALREADY_REVIEWED: 409,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.INVALID_RATING: 422,
}


class ServiceState:
    """One clock, one lock and one instance of each store."""

    def __init__(self):
        if config.CLOCK_MODE == "epoch":
            self.clock = EpochClock(config.GENESIS_EPOCH, config.BLOCK_SECONDS)
        else:
            self.clock = ManualClock(height=config.MANUAL_START_HEIGHT)
        lock = threading.RLock()
        admin = config.ADMIN_IDENTITY
        self.suppliers = SupplierVerification(admin, clock=self.clock, lock=lock)
        self.labor = LaborCertificationStore(admin, clock=self.clock, lock=lock)
        self.materials = MaterialTracking(admin, clock=self.clock, lock=lock)
        self.consumer = ConsumerVerification(admin, clock=self.clock, lock=lock)
        self.mutation_limiter = RateLimiter(config.MUTATION_RPM)

    def stores(self) -> Dict[str, Any]:
        return {
            "suppliers": self.suppliers,
            "labor": self.labor,
            "materials": self.materials,
            "consumer": self.consumer,
        }


STATE = ServiceState()


def reset_state() -> None:
    global STATE
    STATE = ServiceState()


@app.on_event("startup")
def _startup():
    configure_logging(level=config.log_level(), json_format=config.LOG_JSON)
    logger.info("EthicalTrace service starting (env=%s, clock=%s)", config.ENV, config.CLOCK_MODE)


@app.middleware("http")
async def request_context(request: Request, call_next):
    request_id = set_request_id(request.headers.get("x-request-id"))
    response = await call_next(request)
    response.headers["X-Request-ID"] = request_id
    return response


@app.exception_handler(ValidationError)
async def _validation_error(request: Request, exc: ValidationError):
    return JSONResponse(status_code=422, content={"detail": {"field": exc.field, "message": exc.message}})


async def caller_identity(request: Request) -> str:
    """Resolve X-Caller, verifying its signature when signed calls are required."""
    body: Optional[Dict[str, Any]] = None
    raw = await request.body()
    if raw and config.REQUIRE_SIGNED_CALLS:
        try:
            body = json.loads(raw)
        except ValueError:
            raise HTTPException(400, "INVALID_JSON_BODY")
    try:
        return authenticate_caller(
            request.headers,
            request.method,
            request.url.path,
            body,
            now_epoch=int(time.time()),
            require_signature=config.REQUIRE_SIGNED_CALLS,
            freshness_seconds=config.SIGNATURE_FRESHNESS_SECONDS,
        )
    except CallerAuthError as e:
        audit_log.security_event(
            "CALLER_AUTH_FAILED", "medium", reason=e.reason, path=request.url.path
        )
        raise HTTPException(401, e.reason)


def mutating_caller(caller: str = Depends(caller_identity)) -> str:
    result = STATE.mutation_limiter.check(caller)
    if not result.allowed:
        audit_log.security_event("RATE_LIMITED", "low", caller=caller)
        raise HTTPException(
            429, "RATE_LIMIT", headers={"Retry-After": str(int(result.retry_after or 0) + 1)}
        )
    return caller


def respond(outcome: Outcome):
    if outcome:
        return outcome.to_dict()
    return JSONResponse(
        status_code=STATUS_BY_KIND[outcome.kind],
        content={"err": outcome.code, "kind": outcome.kind.value},
    )


def as_dict(record) -> Optional[Dict[str, Any]]:
    return record.to_dict() if record is not None else None


@app.get("/health")
def health():
    return {"status": "ok", "env": config.ENV, "block_height": STATE.clock.now()}


# ============================================================
# Clock
# ============================================================

@app.get("/clock")
def get_clock():
    return {"mode": config.CLOCK_MODE, "block_height": STATE.clock.now()}


@app.post("/clock/advance")
def advance_clock(req: AdvanceClockRequest, caller: str = Depends(mutating_caller)):
    if not config.manual_clock_enabled() or not isinstance(STATE.clock, ManualClock):
        raise HTTPException(404, "MANUAL_CLOCK_DISABLED")
    height = STATE.clock.advance(req.blocks)
    logger.info("Clock advanced by %d blocks to %d (caller=%s)", req.blocks, height, caller)
    return {"mode": config.CLOCK_MODE, "block_height": height}


# ============================================================
# Admin
# ============================================================

@app.get("/admins")
def get_admins():
    return {name: store.admin for name, store in STATE.stores().items()}


@app.post("/{store}/admin/transfer")
def transfer_admin(store: str, req: TransferAdminRequest, caller: str = Depends(mutating_caller)):
    target = STATE.stores().get(store)
    if target is None:
        raise HTTPException(404, "UNKNOWN_STORE")
    return respond(target.transfer_admin(caller, req.new_admin))


# ============================================================
# Supplier verification
# ============================================================

@app.post("/standards/suppliers/{standard_id}")
def add_ethical_standard(standard_id: str, req: EthicalStandardRequest,
                         caller: str = Depends(mutating_caller)):
    return respond(STATE.suppliers.add_ethical_standard(
        caller, standard_id, req.name, req.description, req.required_score))


@app.get("/standards/suppliers/{standard_id}")
def get_ethical_standard(standard_id: str):
    return as_dict(STATE.suppliers.get_ethical_standard(standard_id))


@app.post("/suppliers/{supplier_id}")
def register_supplier(supplier_id: str, req: RegisterSupplierRequest,
                      caller: str = Depends(mutating_caller)):
    return respond(STATE.suppliers.register_supplier(caller, supplier_id, req.name))


@app.get("/suppliers/{supplier_id}")
def get_supplier(supplier_id: str):
    return as_dict(STATE.suppliers.get_supplier(supplier_id))


@app.post("/suppliers/{supplier_id}/verify")
def verify_supplier(supplier_id: str, req: VerifySupplierRequest,
                    caller: str = Depends(mutating_caller)):
    return respond(STATE.suppliers.verify_supplier(caller, supplier_id, req.ethical_score))


@app.post("/suppliers/{supplier_id}/compliance/{standard_id}")
def record_supplier_compliance(supplier_id: str, standard_id: str, req: SupplierComplianceRequest,
                               caller: str = Depends(mutating_caller)):
    return respond(STATE.suppliers.record_compliance(
        caller, supplier_id, standard_id, req.compliant, req.evidence_hash))


@app.get("/suppliers/{supplier_id}/compliance/{standard_id}")
def check_supplier_compliance(supplier_id: str, standard_id: str):
    return STATE.suppliers.check_compliance(supplier_id, standard_id).to_dict()


# ============================================================
# Labor certification
# ============================================================

@app.post("/standards/labor/{standard_id}")
def add_labor_standard(standard_id: str, req: LaborStandardRequest,
                       caller: str = Depends(mutating_caller)):
    return respond(STATE.labor.add_labor_standard(
        caller, standard_id, req.name, req.description, req.minimum_wage, req.max_hours_per_week))


@app.get("/standards/labor/{standard_id}")
def get_labor_standard(standard_id: str):
    return as_dict(STATE.labor.get_labor_standard(standard_id))


@app.post("/labor/{entity_id}")
def register_certification(entity_id: str, req: RegisterCertificationRequest,
                           caller: str = Depends(mutating_caller)):
    return respond(STATE.labor.register_certification(
        caller, entity_id, req.name, req.certification_type, req.expiration_blocks))


@app.get("/labor/{entity_id}")
def get_certification(entity_id: str):
    return as_dict(STATE.labor.get_certification(entity_id))


@app.post("/labor/{entity_id}/certify")
def certify_entity(entity_id: str, req: CertifyEntityRequest,
                   caller: str = Depends(mutating_caller)):
    return respond(STATE.labor.certify_entity(caller, entity_id, req.expiration_blocks))


@app.get("/labor/{entity_id}/valid")
def is_certification_valid(entity_id: str):
    return {"valid": STATE.labor.is_certification_valid(entity_id)}


@app.post("/labor/{entity_id}/compliance/{standard_id}")
def record_labor_compliance(entity_id: str, standard_id: str, req: LaborComplianceRequest,
                            caller: str = Depends(mutating_caller)):
    return respond(STATE.labor.record_compliance(
        caller, entity_id, standard_id, req.compliant, req.evidence_hash, req.next_audit_blocks))


@app.get("/labor/{entity_id}/compliance/{standard_id}")
def get_labor_compliance(entity_id: str, standard_id: str):
    return as_dict(STATE.labor.get_compliance(entity_id, standard_id))


@app.get("/labor/{entity_id}/compliance/{standard_id}/audit-due")
def is_audit_due(entity_id: str, standard_id: str):
    return {"audit_due": STATE.labor.is_audit_due(entity_id, standard_id)}


# ============================================================
# Material tracking
# ============================================================

@app.post("/materials/{material_id}")
def register_material(material_id: str, req: RegisterMaterialRequest,
                      caller: str = Depends(mutating_caller)):
    return respond(STATE.materials.register_material(
        caller, material_id, req.name, req.origin, req.supplier_id))


@app.get("/materials/{material_id}")
def get_material(material_id: str):
    return as_dict(STATE.materials.get_material(material_id))


@app.post("/materials/{material_id}/certify")
def certify_material(material_id: str, caller: str = Depends(mutating_caller)):
    return respond(STATE.materials.certify_material(caller, material_id))


@app.get("/materials/{material_id}/certified")
def is_material_certified(material_id: str):
    return {"certified": STATE.materials.is_material_certified(material_id)}


# ============================================================
# Consumer verification
# ============================================================

@app.put("/consumer/products/{product_id}/verification")
def register_verification(product_id: str, req: ProductVerificationRequest,
                          caller: str = Depends(mutating_caller)):
    return respond(STATE.consumer.register_verification(
        caller, product_id, req.ethical_score, req.labor_certified,
        req.materials_certified, req.verification_hash))


@app.get("/consumer/products/{product_id}/verification")
def get_product_verification(product_id: str):
    return as_dict(STATE.consumer.get_product_verification(product_id))


@app.get("/consumer/products/{product_id}/ethical")
def is_product_ethical(product_id: str):
    return {"ethical": STATE.consumer.is_product_ethical(product_id)}


@app.post("/consumer/products/{product_id}/reviews")
def submit_review(product_id: str, req: ReviewRequest, caller: str = Depends(mutating_caller)):
    return respond(STATE.consumer.submit_review(
        caller, product_id, req.rating, req.review_text, req.verified_purchase))


@app.get("/consumer/products/{product_id}/reviews/{reviewer}")
def get_product_review(product_id: str, reviewer: str):
    return as_dict(STATE.consumer.get_product_review(product_id, reviewer))


@app.post("/consumer/requests/{request_id}")
def request_verification(request_id: str, req: OpenVerificationRequest,
                         caller: str = Depends(mutating_caller)):
    return respond(STATE.consumer.request_verification(caller, request_id, req.product_id))


@app.get("/consumer/requests/{request_id}")
def get_verification_request(request_id: str):
    return as_dict(STATE.consumer.get_verification_request(request_id))


@app.post("/consumer/requests/{request_id}/respond")
def respond_to_request(request_id: str, req: RespondRequest, caller: str = Depends(mutating_caller)):
    return respond(STATE.consumer.respond_to_request(caller, request_id, req.status, req.response_hash))
