import logging
import threading
from typing import Set

from fastapi import FastAPI, HTTPException

from .config import configure_logging, load_settings
from .models import GenerateRequest, GenerateResponse, SignupRequest, SignupResponse
from .username_generator import ExhaustedError, UsernameGenerationError, UsernameGenerator

logger = logging.getLogger(__name__)

settings = load_settings()
generator = UsernameGenerator(settings.replacement_rules)

app = FastAPI(title="Usergen")

# Usernames handed out by /users/signup. In-process only.
registered_usernames: Set[str] = set()
_registry_lock = threading.Lock()


def _http_error(exc: UsernameGenerationError) -> HTTPException:
    status = 409 if isinstance(exc, ExhaustedError) else 400
    return HTTPException(status_code=status, detail=str(exc))


@app.on_event("startup")
def setup_logging():
    configure_logging(settings)


@app.post("/usernames/generate", response_model=GenerateResponse)
def generate(body: GenerateRequest):
    min_length = settings.min_length if body.min_length is None else body.min_length
    max_length = settings.max_length if body.max_length is None else body.max_length
    try:
        username = generator.generate_unique_username(
            body.first_name,
            body.last_name,
            min_length,
            max_length,
            set(body.existing_usernames),
        )
    except UsernameGenerationError as e:
        raise _http_error(e) from e
    return GenerateResponse(username=username)


@app.post("/users/signup", response_model=SignupResponse)
def signup(body: SignupRequest):
    # Generation and insert must happen under one lock or two signups can
    # receive the same username.
    with _registry_lock:
        try:
            username = generator.generate_unique_username(
                body.first_name,
                body.last_name,
                settings.min_length,
                settings.max_length,
                registered_usernames,
            )
        except UsernameGenerationError as e:
            raise _http_error(e) from e
        registered_usernames.add(username)
    logger.info("registered username %s", username)
    return SignupResponse(user_id=username)


# --- Health ---


@app.get("/health")
def health():
    return {"ok": True}
