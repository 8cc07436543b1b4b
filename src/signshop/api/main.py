import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from signshop import __version__
from signshop.api.admin_api import router as admin_router
from signshop.api.catalog_api import router as catalog_router
from signshop.api.orders_api import CalcRequest, calculate, router as orders_router

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

app = FastAPI(
    title="Sign Shop Manager API",
    description="Backend API for the print and signage shop back office",
    version=__version__,
)

# Enable CORS for frontend development
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(catalog_router)
app.include_router(orders_router)
app.include_router(admin_router)


@app.get("/")
async def root():
    return {"status": "online", "message": "Sign Shop Manager API Active"}


@app.post("/calculate")
async def calculate_breakdown(req: CalcRequest):
    """Cost and price breakdown for posted order lines."""
    return calculate(req)
