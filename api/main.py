from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from accelerators import router as accelerators_router
from assistant import router as assistant_router
from auth import router as auth_router
from companies import router as companies_router
from core import config, db, errors
from core.logging_config import configure_logging
from emails import router as emails_router
from people import router as people_router
from users import router as users_router

API_PREFIX = "/api/v1"


@asynccontextmanager
async def lifespan(_: FastAPI):
    configure_logging()
    # Initialize the DB pool once per process.
    await db.init_pool()
    try:
        yield
    finally:
        await db.close_pool()


app = FastAPI(title="startup-directory api", lifespan=lifespan)

# The browser frontend sends the session cookie, so credentials are allowed.
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

errors.install(app)

app.include_router(auth_router.router, prefix=f"{API_PREFIX}/auth", tags=["auth"])
app.include_router(users_router.router, prefix=f"{API_PREFIX}/users", tags=["users"])
app.include_router(users_router.admin_router, prefix=f"{API_PREFIX}/admin", tags=["admin"])
app.include_router(accelerators_router.router, prefix=f"{API_PREFIX}/accelerators", tags=["accelerators"])
app.include_router(companies_router.router, prefix=f"{API_PREFIX}/companies", tags=["companies"])
app.include_router(people_router.router, prefix=f"{API_PREFIX}/people", tags=["people"])
app.include_router(emails_router.router, prefix=f"{API_PREFIX}/emails", tags=["emails"])
app.include_router(assistant_router.router, prefix=f"{API_PREFIX}/ai", tags=["ai"])


@app.get("/health")
def health() -> dict:
    return {"status": "ok"}


@app.get("/")
def root() -> dict:
    return {"message": "startup-directory api"}
