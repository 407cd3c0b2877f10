# app/seed.py
"""
Sample catalog for local development.

Run on startup when SEED_CATALOG is enabled, or by hand:

    python -m app.seed
"""
import logging

from sqlmodel import Session

from app.database import create_db_and_tables, get_engine
from app.models.product import Category
from app.repositories.product_repo import ProductRepository
from app.schemas.product import ProductCreate
from app.services.product_service import ProductService

logger = logging.getLogger(__name__)

_IMAGE = "https://images.unsplash.com/{}?auto=format&fit=crop&w=600&h=400"

SAMPLE_PRODUCTS: list[ProductCreate] = [
    ProductCreate(
        name="Gaming PC RGB Pro",
        description="Intel i7, 16GB RAM, RTX 4070, 1TB SSD",
        price="3499.00",
        image=_IMAGE.format("photo-1587831990711-23ca6441447b"),
        category=Category.COMPUTERS,
        specifications=[
            "Intel Core i7-12700F",
            "16GB DDR4 3200MHz",
            "NVIDIA RTX 4070 8GB",
            "1TB NVMe SSD",
            "650W 80+ Bronze PSU",
            "Mid Tower case with RGB",
        ],
    ),
    ProductCreate(
        name="Dell Inspiron 15 Notebook",
        description='Intel i5, 8GB RAM, 256GB SSD, 15.6" display',
        price="2299.00",
        image=_IMAGE.format("photo-1496181133206-80ce9b88a853"),
        category=Category.NOTEBOOKS,
        specifications=[
            "Intel Core i5-1135G7",
            "8GB DDR4",
            "256GB SSD",
            '15.6" Full HD display',
            "Windows 11",
            "3-cell battery",
        ],
    ),
    ProductCreate(
        name="Mechanical Gaming Keyboard RGB",
        description="Blue switches, RGB lighting, ABNT2 layout",
        price="349.00",
        image=_IMAGE.format("photo-1541140532154-b024d705b90a"),
        category=Category.PERIPHERALS,
        specifications=[
            "Blue mechanical switches",
            "Customizable RGB lighting",
            "ABNT2 layout",
            "Anti-ghosting",
            "Detachable USB cable",
        ],
    ),
    ProductCreate(
        name='Gaming Monitor 27" 144Hz',
        description="Full HD, 1ms, FreeSync, curved",
        price="899.00",
        image=_IMAGE.format("photo-1527443224154-c4a3942d3acf"),
        category=Category.PERIPHERALS,
        specifications=[
            "27 inches",
            "Full HD 1920x1080",
            "144Hz refresh rate",
            "1ms response time",
            "AMD FreeSync",
            "1500R curvature",
        ],
    ),
    ProductCreate(
        name="Gaming Mouse RGB Pro",
        description="16000 DPI, 7 buttons, customizable RGB",
        price="199.00",
        image=_IMAGE.format("photo-1527864550417-7fd91fc51a46"),
        category=Category.PERIPHERALS,
        specifications=[
            "16000 DPI optical sensor",
            "7 programmable buttons",
            "Customizable RGB lighting",
            "Right-handed ergonomics",
            "1.8m braided cable",
        ],
    ),
    ProductCreate(
        name="Surround Gaming Headset",
        description="Virtual 7.1, noise-cancelling microphone",
        price="299.00",
        image=_IMAGE.format("photo-1608043152269-423dbba4e7e1"),
        category=Category.PERIPHERALS,
        specifications=[
            "Virtual 7.1 surround",
            "Noise-cancelling microphone",
            "50mm drivers",
            "Leather ear cushions",
            "PC and console compatible",
        ],
    ),
]


def seed_products(session: Session) -> int:
    """
    Insert the sample catalog if the products table is empty.

    Returns the number of products inserted (0 when already seeded).
    """
    repo = ProductRepository()
    if repo.count(session) > 0:
        return 0

    service = ProductService(repo)
    for payload in SAMPLE_PRODUCTS:
        service.create_product(session, payload)
    logger.info("Seeded %d products", len(SAMPLE_PRODUCTS))
    return len(SAMPLE_PRODUCTS)


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    create_db_and_tables()
    with Session(get_engine()) as session:
        inserted = seed_products(session)
    logger.info("Done, %d products inserted", inserted)
