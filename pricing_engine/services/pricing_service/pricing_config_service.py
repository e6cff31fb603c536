import logging

from sqlalchemy.orm import Session

from pricing_engine.core.security import ensure_admin
from pricing_engine.models.pricing_config import PricingConfig
from pricing_engine.schemas.pricing_config import PricingConfigUpdate
from pricing_engine.schemas.user import Actor

logger = logging.getLogger(__name__)


def _get_or_create_config(db: Session) -> PricingConfig:
    config = db.query(PricingConfig).order_by(PricingConfig.id.asc()).first()
    if not config:
        config = PricingConfig()
        db.add(config)
        db.commit()
        db.refresh(config)
    return config


def get_pricing_config(db: Session, actor: Actor) -> PricingConfig:
    ensure_admin(actor)
    return _get_or_create_config(db)


def update_pricing_config(db: Session, actor: Actor, data: PricingConfigUpdate) -> PricingConfig:
    ensure_admin(actor)
    config = _get_or_create_config(db)

    for key, value in data.model_dump(exclude_unset=True).items():
        if value is None:
            continue
        setattr(config, key, value)
    config.updated_by = actor.id

    db.commit()
    db.refresh(config)
    logger.info("Pricing config updated by %s", actor.id)
    return config
