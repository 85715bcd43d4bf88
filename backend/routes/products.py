# backend/routes/products.py
import logging
import uuid
from pathlib import Path

from fastapi import APIRouter, Depends, File, UploadFile, status
from sqlalchemy.orm import Session

from config import Settings, get_settings
from database import get_db
from models.product import Product
from models.review import Review
from schemas import product as product_schemas
from schemas import review as review_schemas
from schemas.user import TokenUser
from utils.authentication import authorize_roles
from utils.errors import BadRequestError, NotFoundError

router = APIRouter(prefix="/products", tags=["Products"])
logger = logging.getLogger(__name__)


# ---- HELPERS ----
def _get_product(db: Session, product_id: int) -> Product:
    product = db.query(Product).filter(Product.id == product_id).first()
    if not product:
        raise NotFoundError(f"No product with id : {product_id}")
    return product


# =========================
# PRODUCT LIST
# =========================
@router.get("", response_model=product_schemas.ProductListResponse)
def get_all_products(db: Session = Depends(get_db)):
    products = db.query(Product).order_by(Product.id).all()
    return {"products": products, "count": len(products)}


# =========================
# CREATE PRODUCT
# =========================
@router.post("", response_model=product_schemas.ProductResponse, status_code=status.HTTP_201_CREATED)
def create_product(
    payload: product_schemas.ProductCreate,
    db: Session = Depends(get_db),
    current_user: TokenUser = Depends(authorize_roles("admin")),
):
    data = payload.model_dump(exclude_none=True)
    product = Product(**data, user_id=int(current_user.user_id))
    db.add(product)
    db.commit()
    db.refresh(product)
    return {"product": product}


# =========================
# IMAGE UPLOAD
# =========================
@router.post("/uploadImage", response_model=product_schemas.ImageUploadResponse,
             status_code=status.HTTP_201_CREATED)
def upload_image(
    image: UploadFile = File(None),
    settings: Settings = Depends(get_settings),
    current_user: TokenUser = Depends(authorize_roles("admin")),
):
    if image is None:
        raise BadRequestError("No file uploaded!")
    try:
        if not (image.content_type or "").startswith("image/"):
            raise BadRequestError("Please upload an image!")

        content = image.file.read(settings.MAX_IMAGE_SIZE + 1)
        if len(content) > settings.MAX_IMAGE_SIZE:
            raise BadRequestError(f"Image size must not exceed {settings.MAX_IMAGE_SIZE // 1024} KB")

        suffix = Path(image.filename or "").suffix.lower() or ".img"
        unique_filename = f"{uuid.uuid4().hex}{suffix}"
        upload_dir = Path(settings.UPLOAD_DIR)
        upload_dir.mkdir(parents=True, exist_ok=True)
        (upload_dir / unique_filename).write_bytes(content)
    finally:
        image.file.close()

    logger.info("Product image %s uploaded by user %s", unique_filename, current_user.user_id)
    return {"image": f"/uploads/{unique_filename}"}


# =========================
# SINGLE PRODUCT
# =========================
@router.get("/{product_id}", response_model=review_schemas.ProductDetailResponse)
def get_single_product(product_id: int, db: Session = Depends(get_db)):
    return {"product": _get_product(db, product_id)}


@router.patch("/{product_id}", response_model=product_schemas.ProductResponse)
def update_product(
    product_id: int,
    payload: product_schemas.ProductUpdate,
    db: Session = Depends(get_db),
    current_user: TokenUser = Depends(authorize_roles("admin")),
):
    product = _get_product(db, product_id)
    for key, value in payload.model_dump(exclude_unset=True).items():
        if value is not None:
            setattr(product, key, value)
    db.commit()
    db.refresh(product)
    return {"product": product}


@router.delete("/{product_id}")
def delete_product(
    product_id: int,
    db: Session = Depends(get_db),
    current_user: TokenUser = Depends(authorize_roles("admin")),
):
    product = _get_product(db, product_id)
    # Reviews go with their product
    db.query(Review).filter(Review.product_id == product.id).delete()
    db.delete(product)
    db.commit()
    return {"msg": "Product deleted successfully!"}


@router.get("/{product_id}/reviews", response_model=review_schemas.ReviewList)
def get_single_product_reviews(product_id: int, db: Session = Depends(get_db)):
    reviews = db.query(Review).filter(Review.product_id == product_id).order_by(Review.id).all()
    return {"reviews": reviews, "count": len(reviews)}
