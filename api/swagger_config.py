"""
OpenAPI/Swagger Configuration
Configuración de la documentación de la API de pagos con flasgger
"""

# Configuración de la UI de Swagger
swagger_ui_config = {
    "docExpansion": "list",
    "displayRequestDuration": True,
    "tryItOutEnabled": True
}

# Configuración principal de Swagger
swagger_config = {
    "headers": [],
    "specs": [
        {
            "endpoint": 'apispec',
            "route": '/apispec.json',
            "rule_filter": lambda rule: rule.endpoint.startswith('payments.'),
            "model_filter": lambda tag: True,
        }
    ],
    "static_url_path": "/flasgger_static",
    "swagger_ui": True,
    "specs_route": "/api/docs",
    "ui_params": swagger_ui_config
}

_error_response = {
    "content": {
        "application/json": {
            "schema": {
                "type": "object",
                "properties": {
                    "error": {"type": "string"}
                }
            }
        }
    }
}

# Plantilla base OpenAPI 3.0
swagger_template = {
    "openapi": "3.0.0",
    "info": {
        "title": "Agencia de Viajes - Pagos Redsys",
        "description": """
        Pagos de reservas con el TPV virtual de Redsys (firma HMAC_SHA256_V1).

        ## Flujo
        1. `POST /pagos/redsys/checkout` devuelve el formulario firmado de preautorización
        2. Redsys notifica el resultado en `POST /pagos/redsys/notificacion`
        3. `POST /pagos/redsys/confirmar` captura la preautorización

        ## Rate Limiting
        - Checkout: 5 solicitudes/minuto
        """,
        "version": "1.0.0",
        "contact": {
            "name": "Agencia de Viajes",
            "url": "https://agencia.com",
            "email": "soporte@agencia.com"
        }
    },
    "servers": [
        {
            "url": "http://localhost:8000",
            "description": "Servidor de desarrollo"
        }
    ],
    "tags": [
        {
            "name": "Pagos",
            "description": "Preautorización, notificación y confirmación con Redsys"
        }
    ],
    "components": {
        "responses": {
            "BadRequest": dict(_error_response, description="Solicitud inválida"),
            "NotFound": dict(_error_response, description="Recurso no encontrado"),
            "Conflict": dict(_error_response, description="Estado de pago incompatible"),
            "RateLimitExceeded": dict(_error_response, description="Límite de solicitudes excedido"),
            "BadGateway": dict(_error_response, description="Error de comunicación con Redsys"),
            "ServerError": dict(_error_response, description="Error interno del servidor")
        }
    }
}
