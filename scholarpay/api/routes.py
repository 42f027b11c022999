"""FastAPI endpoints for the ScholarPay API.

This module defines the routes for scholarship applications (student submission, government review and payout), payee registration tasks, the payment provider's payees, wallet and transactions, response normalization, and the OAuth callback. Data endpoints never fail because the provider is down: they answer with demo data and a notice instead.
"""

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Query
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from sqlalchemy.orm import Session

from scholarpay.api.dependencies import (
    CurrentUser,
    get_current_user,
    get_normalizer,
    get_payee_queue,
    get_payman_client,
    get_payment_service,
    get_registry,
    get_session,
    require_government,
    require_student,
)
from scholarpay.core.errors import ProviderError
from scholarpay.core.models import (
    Application,
    ApplicationCreate,
    ApplicationSubmission,
    NormalizedResult,
    NormalizeRequest,
    OAuthRedirect,
    PayeeCreate,
    PayeeTask,
    PaymentRequest,
    ProviderReply,
    StatusChange,
    StatusUpdate,
    TransactionHistory,
)
from scholarpay.core.settings import Settings, get_settings
from scholarpay.core.utils import get_logger
from scholarpay.parsers.fallback import demo_history
from scholarpay.parsers.normalizer import ResponseNormalizer
from scholarpay.services.application_service import ApplicationRegistry, Scheduler
from scholarpay.services.payman_client import PaymanClient
from scholarpay.services.payment_service import PaymentService
from scholarpay.services.token_store import clear_tokens, save_token
from scholarpay.workers.payee_tasks import PayeeRegistrationQueue

router = APIRouter()
logger = get_logger("scholarpay.api")

PROVIDER_NOTICE = "The payment provider could not be reached; showing demo data."


def payee_scheduler(
    background_tasks: BackgroundTasks, queue: PayeeRegistrationQueue, client: PaymanClient
) -> Scheduler:
    """Build a scheduler that runs payee registration tasks after the response is sent."""

    def schedule(task: PayeeTask) -> None:
        background_tasks.add_task(queue.run, task.id, client)

    return schedule


def status_change_response(change: StatusChange) -> JSONResponse | StatusChange:
    """Answer 409 with the unchanged record when a transition was refused."""
    if not change.success:
        return JSONResponse(status_code=409, content=change.model_dump())
    return change


# --- Applications ---


@router.post(
    "/applications",
    status_code=201,
    response_model=Application,
    summary="Submit a scholarship application",
    description=(
        "Create a new application for the calling student. The record starts with status `pending` "
        "and today's date.\n\n"
        "**Response:**\n"
        "- 201 Created: the stored application.\n"
        "- 403 Forbidden: caller is not a student.\n"
        "- 422 Unprocessable Entity: a required field is empty or the amount is not positive."
    ),
    responses={
        403: {"description": "Student role required."},
        422: {"description": "Invalid application fields."},
    },
)
async def submit_application(
    body: ApplicationSubmission,
    background_tasks: BackgroundTasks,
    user: CurrentUser = Depends(require_student),
    registry: ApplicationRegistry = Depends(get_registry),
    queue: PayeeRegistrationQueue = Depends(get_payee_queue),
    client: PaymanClient = Depends(get_payman_client),
    settings: Settings = Depends(get_settings),
) -> Application:
    """Submit an application on behalf of the calling student."""
    logger.info(f"Received application from {user.email}: {body.scholarship_name}")
    try:
        data = ApplicationCreate(student_email=user.email, **body.model_dump())
    except ValidationError as exc:
        logger.warning(f"Rejected application from {user.email}: {exc.errors(include_url=False)}")
        raise HTTPException(422, exc.errors(include_url=False, include_context=False, include_input=False)) from exc
    schedule = payee_scheduler(background_tasks, queue, client) if settings.register_payee_on_submit else None
    return registry.submit(data, schedule=schedule)


@router.get(
    "/applications",
    response_model=list[Application],
    summary="List all applications (government)",
)
async def list_applications(
    status: str | None = Query(default=None, description="Only applications with this status"),
    _: CurrentUser = Depends(require_government),
    registry: ApplicationRegistry = Depends(get_registry),
) -> list[Application]:
    """Return all applications, newest first."""
    applications = registry.list_all()
    if status:
        applications = [app for app in applications if app.status == status]
    return applications


@router.get(
    "/applications/mine",
    response_model=list[Application],
    summary="List the calling student's applications",
)
async def list_my_applications(
    user: CurrentUser = Depends(require_student),
    registry: ApplicationRegistry = Depends(get_registry),
) -> list[Application]:
    """Return the calling student's applications, newest first."""
    return registry.list_for_student(user.email)


@router.get(
    "/applications/{application_id}",
    response_model=Application,
    summary="Get one application",
    responses={404: {"description": "Application not found."}},
)
async def get_application(
    application_id: str,
    user: CurrentUser = Depends(get_current_user),
    registry: ApplicationRegistry = Depends(get_registry),
) -> Application:
    """Return an application; students only see their own."""
    application = registry.get(application_id)
    if user.role == "student" and application.student_email != user.email:
        raise HTTPException(404, "Application not found")
    return application


@router.patch(
    "/applications/{application_id}/status",
    response_model=StatusChange,
    summary="Approve, reject or mark an application paid (government)",
    description=(
        "Allowed transitions: `pending -> approved`, `pending -> rejected`, `approved -> paid`.\n\n"
        "Approving schedules a background registration of the student as a payee. The approval holds "
        "even if that registration fails; follow it through `GET /payee-tasks/{task_id}`.\n\n"
        "**Response:**\n"
        "- 200 OK: the updated application and the payee task, if one was scheduled.\n"
        "- 404 Not Found: unknown application.\n"
        "- 409 Conflict: transition not allowed; the record is returned unchanged."
    ),
    responses={
        404: {"description": "Application not found."},
        409: {"description": "Transition not allowed."},
    },
)
async def update_status(
    application_id: str,
    body: StatusUpdate,
    background_tasks: BackgroundTasks,
    _: CurrentUser = Depends(require_government),
    registry: ApplicationRegistry = Depends(get_registry),
    queue: PayeeRegistrationQueue = Depends(get_payee_queue),
    client: PaymanClient = Depends(get_payman_client),
) -> JSONResponse | StatusChange:
    """Apply a status transition."""
    change = registry.set_status(
        application_id, body.status, schedule=payee_scheduler(background_tasks, queue, client)
    )
    return status_change_response(change)


@router.post(
    "/applications/{application_id}/pay",
    response_model=StatusChange,
    summary="Pay out an approved application (government)",
    responses={
        404: {"description": "Application not found."},
        409: {"description": "Application is not approved."},
        502: {"description": "Payment provider failed; the application stays approved."},
    },
)
async def pay_application(
    application_id: str,
    _: CurrentUser = Depends(require_government),
    payments: PaymentService = Depends(get_payment_service),
) -> JSONResponse | StatusChange:
    """Send the scholarship amount to the student and mark the application paid."""
    change = await payments.pay_application(application_id)
    return status_change_response(change)


@router.get(
    "/payee-tasks/{task_id}",
    response_model=PayeeTask,
    summary="Get the status of a payee registration task",
    responses={404: {"description": "Task not found."}},
)
async def get_payee_task(
    task_id: str,
    _: CurrentUser = Depends(get_current_user),
    session: Session = Depends(get_session),
    queue: PayeeRegistrationQueue = Depends(get_payee_queue),
) -> PayeeTask:
    """Return a payee registration task."""
    task = queue.get(session, task_id)
    if task is None:
        raise HTTPException(404, "Task not found")
    return task


# --- Payment provider ---


@router.get("/payees", response_model=NormalizedResult, summary="List payees registered with the provider")
async def list_payees(
    _: CurrentUser = Depends(get_current_user),
    client: PaymanClient = Depends(get_payman_client),
    normalizer: ResponseNormalizer = Depends(get_normalizer),
) -> NormalizedResult:
    """Return the provider's payees, or demo payees with a notice when the provider fails."""
    try:
        response = await client.list_payees()
    except ProviderError as exc:
        logger.warning(f"Payee list unavailable: {exc}")
        return normalizer.fallback("payees", notice=PROVIDER_NOTICE)
    return normalizer.normalize_response(response, "payees")


@router.post(
    "/payees",
    status_code=201,
    response_model=ProviderReply,
    summary="Register a payee with the provider (government)",
    responses={502: {"description": "Payment provider failed."}},
)
async def add_payee(
    body: PayeeCreate,
    _: CurrentUser = Depends(require_government),
    payments: PaymentService = Depends(get_payment_service),
) -> ProviderReply:
    """Add a payee."""
    return await payments.add_payee(body.email, body.name)


@router.post(
    "/payments",
    response_model=ProviderReply,
    summary="Send a payment to a payee (government)",
    responses={502: {"description": "Payment provider failed."}},
)
async def send_payment(
    body: PaymentRequest,
    _: CurrentUser = Depends(require_government),
    payments: PaymentService = Depends(get_payment_service),
) -> ProviderReply:
    """Pay a registered payee."""
    return await payments.send_payment(body)


@router.get("/wallet/balance", response_model=NormalizedResult, summary="Get the wallet balance (government)")
async def wallet_balance(
    _: CurrentUser = Depends(require_government),
    client: PaymanClient = Depends(get_payman_client),
    normalizer: ResponseNormalizer = Depends(get_normalizer),
) -> NormalizedResult:
    """Return the wallet balance, or the demo balance with a notice when the provider fails."""
    try:
        response = await client.get_wallet_balance()
    except ProviderError as exc:
        logger.warning(f"Wallet balance unavailable: {exc}")
        return normalizer.fallback("balance", notice=PROVIDER_NOTICE)
    return normalizer.normalize_response(response, "balance")


@router.get(
    "/wallet/transactions",
    response_model=TransactionHistory,
    summary="Get the wallet summary and transaction history (government)",
)
async def wallet_transactions(
    _: CurrentUser = Depends(require_government),
    client: PaymanClient = Depends(get_payman_client),
    normalizer: ResponseNormalizer = Depends(get_normalizer),
) -> TransactionHistory:
    """Return the transaction history, or demo history with a notice when the provider fails."""
    try:
        response = await client.get_transaction_history()
    except ProviderError as exc:
        logger.warning(f"Transaction history unavailable: {exc}")
        return demo_history(PROVIDER_NOTICE)
    return normalizer.normalize_history(response)


@router.post(
    "/normalize",
    response_model=NormalizedResult,
    summary="Normalize raw provider content",
    description="Run provider text (or a JSON payload) through the parser registered for its shape.",
)
async def normalize(
    body: NormalizeRequest,
    normalizer: ResponseNormalizer = Depends(get_normalizer),
) -> NormalizedResult:
    """Normalize arbitrary provider content."""
    return normalizer.normalize(body.content, body.category)


# --- OAuth ---


@router.get("/oauth/authorize", summary="Get the provider authorization URL")
async def oauth_authorize(client: PaymanClient = Depends(get_payman_client)) -> dict:
    """Return the URL the browser should open to connect a provider account."""
    return {"authorize_url": client.authorize_url()}


@router.get(
    "/oauth/callback",
    response_model=OAuthRedirect,
    summary="OAuth redirect target",
    description=(
        "Receives `code` or `error` from the provider after authorization and exchanges the code "
        "for an access token server-side."
    ),
    responses={400: {"description": "Authorization was denied or no code was sent."}},
)
async def oauth_callback(
    code: str | None = None,
    error: str | None = None,
    settings: Settings = Depends(get_settings),
    session: Session = Depends(get_session),
    client: PaymanClient = Depends(get_payman_client),
) -> JSONResponse | OAuthRedirect:
    """Exchange the authorization code and store the token."""
    redirect = OAuthRedirect(redirect_uri=settings.payman_redirect_uri, code=code, error=error)
    if error or not code:
        logger.warning(f"OAuth callback without code: error={error}")
        return JSONResponse(status_code=400, content=redirect.model_dump())
    access_token, expires_in = await client.exchange_code(code)
    save_token(session, access_token, expires_in)
    logger.info("Payment provider account connected")
    redirect.connected = True
    return redirect


@router.delete("/oauth/token", status_code=204, summary="Disconnect the provider account")
async def oauth_disconnect(
    _: CurrentUser = Depends(require_government),
    session: Session = Depends(get_session),
) -> None:
    """Forget all stored provider tokens."""
    removed = clear_tokens(session)
    logger.info(f"Removed {removed} provider token(s)")


@router.get(
    "/health",
    summary="Health check",
    description="Simple health check endpoint. Returns status ok.",
    response_description="Status ok.",
    responses={200: {"description": "API is healthy.", "content": {"application/json": {"example": {"status": "ok"}}}}},
)
async def health() -> dict:
    """Health check endpoint."""
    return {"status": "ok"}
