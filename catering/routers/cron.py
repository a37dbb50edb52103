# catering/routers/cron.py: called daily by an external scheduler
import hmac
import logging
from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Header, HTTPException
from sqlalchemy.orm import Session

from catering import config
from catering.db import get_db
from catering.notify.dispatcher import dispatch_scheduled
from catering.services import production
from catering.utils.enums import Trigger

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/cron", tags=["cron"])


def require_cron_secret(x_cron_secret: Optional[str] = Header(None)):
    if not config.CRON_SECRET or not x_cron_secret or not hmac.compare_digest(
        x_cron_secret.encode(), config.CRON_SECRET.encode()
    ):
        raise HTTPException(status_code=401, detail="Unauthorized")


@router.get("/daily-schedule", dependencies=[Depends(require_cron_secret)])
def daily_schedule(background_tasks: BackgroundTasks, db: Session = Depends(get_db)):
    """FOH schedule for tomorrow, kitchen alert for the day after (only when it has orders)."""
    foh_date, kitchen_date = production.schedule_dates()

    foh = production.foh_orders(db, foh_date)
    dispatch_scheduled(background_tasks, db, Trigger.DAILY_SCHEDULE_FOH.value, foh_date,
                       production.foh_schedule_html(foh, foh_date))

    kitchen = production.kitchen_orders(db, kitchen_date)
    if kitchen:
        dispatch_scheduled(background_tasks, db, Trigger.PRODUCTION_ALERT_KITCHEN.value, kitchen_date,
                           production.kitchen_alert_html(kitchen, kitchen_date))

    logger.info("Daily schedule: %d FOH orders on %s, %d kitchen orders on %s",
                len(foh), foh_date, len(kitchen), kitchen_date)
    return {
        "success": True,
        "foh_orders": len(foh),
        "kitchen_orders": len(kitchen),
        "foh_date": foh_date.isoformat(),
        "kitchen_date": kitchen_date.isoformat(),
    }
