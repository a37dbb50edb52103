# catering/routers/admin_pages.py: HTML pages behind the /admin gate
from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import HTMLResponse
from sqlalchemy.orm import Session

from catering.db import get_db
from catering.services import production
from catering.templating import templates

router = APIRouter(prefix="/admin", tags=["admin-pages"])


@router.get("/print", response_class=HTMLResponse)
def print_sheet(request: Request, autoprint: bool = Query(False), db: Session = Depends(get_db)):
    sheet = production.production_sheet_html(production.paid_orders(db))
    return templates.TemplateResponse(request, "admin/print.html", {"sheet_html": sheet, "autoprint": autoprint})
