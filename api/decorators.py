"""
Decoradores para agregar documentación Swagger a los blueprints existentes
"""

from flasgger import swag_from
from api.schemas import (
    checkout_schema,
    notificacion_schema,
    confirmar_schema
)

ENDPOINT_SCHEMAS = {
    'payments.checkout': checkout_schema,
    'payments.notificacion': notificacion_schema,
    'payments.confirmar': confirmar_schema,
}


def documentar_endpoints(app):
    """
    Agrega documentación Swagger a los endpoints existentes
    Esta función debe llamarse después de registrar todos los blueprints
    """
    for endpoint, schema in ENDPOINT_SCHEMAS.items():
        if endpoint in app.view_functions:
            app.view_functions[endpoint] = swag_from(schema)(app.view_functions[endpoint])
