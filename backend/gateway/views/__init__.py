from gateway.views.assets import (
    VIEW_PATHS as VIEW_PATHS,
)
from gateway.views.assets import (
    create_templates as create_templates,
)
