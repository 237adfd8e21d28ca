# app/main.py — FastAPI app entry point

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse

from app.routers import health, identity
from app.routers._responses import identity_error_response
from app.utils.exceptions import IdentityError

app = FastAPI(
    title="shop-identity-api",
    description="Okta user registration and OTP verification",
    version="0.1.0",
)


@app.exception_handler(HTTPException)
async def http_exception_handler(_: Request, exc: HTTPException):
    return JSONResponse(status_code=exc.status_code, content={"error": str(exc.detail)})


@app.exception_handler(IdentityError)
async def identity_exception_handler(_: Request, exc: IdentityError):
    return identity_error_response(exc)

# Include routers
app.include_router(health.router, tags=["health"])
app.include_router(identity.router, prefix="/api/identity", tags=["identity"])
