# workforce_api/models/__init__.py
import importlib

MODEL_MODULES = (
    "user",
    "partner",
    "level",
    "employee",
    "payment",
    "operations",
)

def load_all():
    """Import every model module so the metadata is complete before create_all / autogenerate."""
    for name in MODEL_MODULES:
        importlib.import_module(f"{__name__}.{name}")
