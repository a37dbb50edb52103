# catering/models/__init__.py
from .order import *           # Order
from .order_note import *      # OrderNote
from .catalog import *         # Flavor, MenuItem, Faq
from .email import *           # EmailSetting, EmailTemplate
from .preorder_export import * # PreorderExport
