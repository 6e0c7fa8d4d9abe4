"""
OpenAPI Schemas
Definiciones de esquemas para request/response de la API de pagos
"""

_reserva_request = {
    "required": True,
    "content": {
        "application/json": {
            "schema": {
                "type": "object",
                "required": ["reserva_id"],
                "properties": {
                    "reserva_id": {
                        "type": "string",
                        "description": "ID de la reserva",
                        "example": "3f2c9a1e-5b7d-4c1a-9e0f-7a6b5c4d3e2f"
                    }
                }
            }
        }
    }
}

checkout_schema = {
    "tags": ["Pagos"],
    "summary": "Crear preautorización Redsys",
    "description": "Firma una preautorización (DS_MERCHANT_TRANSACTIONTYPE=1) para la reserva y devuelve el formulario a enviar al TPV.",
    "requestBody": {
        "required": True,
        "content": {
            "application/json": {
                "schema": {
                    "type": "object",
                    "required": ["reserva_id"],
                    "properties": {
                        "reserva_id": {"type": "string"},
                        "descripcion": {
                            "type": "string",
                            "maxLength": 125,
                            "example": "Excursión Teide 2 adultos"
                        },
                        "idioma": {
                            "type": "string",
                            "enum": ["es", "en", "ca", "fr", "de", "nl", "it", "sv", "pt", "pl", "gl", "eu", "da"],
                            "example": "es"
                        }
                    }
                }
            }
        }
    },
    "responses": {
        "200": {
            "description": "Formulario firmado",
            "content": {
                "application/json": {
                    "schema": {
                        "type": "object",
                        "properties": {
                            "url": {"type": "string", "example": "https://sis-t.redsys.es:25443/sis/realizarPago"},
                            "order": {"type": "string", "example": "18000000a1b2"},
                            "form": {
                                "type": "object",
                                "properties": {
                                    "Ds_SignatureVersion": {"type": "string", "example": "HMAC_SHA256_V1"},
                                    "Ds_MerchantParameters": {"type": "string"},
                                    "Ds_Signature": {"type": "string"}
                                }
                            }
                        }
                    }
                }
            }
        },
        "400": {"$ref": "#/components/responses/BadRequest"},
        "404": {"$ref": "#/components/responses/NotFound"},
        "409": {"$ref": "#/components/responses/Conflict"},
        "429": {"$ref": "#/components/responses/RateLimitExceeded"},
        "500": {"$ref": "#/components/responses/ServerError"}
    }
}

notificacion_schema = {
    "tags": ["Pagos"],
    "summary": "Notificación online de Redsys",
    "description": "Endpoint que llama Redsys al terminar la operación (uso interno). Solo una firma válida actualiza la reserva.",
    "requestBody": {
        "required": True,
        "content": {
            "application/x-www-form-urlencoded": {
                "schema": {
                    "type": "object",
                    "required": ["Ds_MerchantParameters", "Ds_Signature"],
                    "properties": {
                        "Ds_SignatureVersion": {"type": "string", "example": "HMAC_SHA256_V1"},
                        "Ds_MerchantParameters": {"type": "string"},
                        "Ds_Signature": {"type": "string"}
                    }
                }
            }
        }
    },
    "responses": {
        "200": {
            "description": "Notificación procesada",
            "content": {
                "application/json": {
                    "schema": {
                        "type": "object",
                        "properties": {
                            "success": {"type": "boolean"},
                            "estado": {"type": "string", "example": "PREAUTORIZADO"}
                        }
                    }
                }
            }
        },
        "400": {"description": "Firma inválida o notificación mal formada"},
        "404": {"$ref": "#/components/responses/NotFound"}
    }
}

confirmar_schema = {
    "tags": ["Pagos"],
    "summary": "Confirmar preautorización",
    "description": "Captura (DS_MERCHANT_TRANSACTIONTYPE=2) una reserva preautorizada mediante la API REST de Redsys.",
    "requestBody": _reserva_request,
    "responses": {
        "200": {
            "description": "Pago capturado",
            "content": {
                "application/json": {
                    "schema": {
                        "type": "object",
                        "properties": {
                            "success": {"type": "boolean"},
                            "codigo_autorizacion": {"type": "string"},
                            "codigo_respuesta": {"type": "string", "example": "0900"}
                        }
                    }
                }
            }
        },
        "402": {"description": "Redsys no autorizó la confirmación"},
        "404": {"$ref": "#/components/responses/NotFound"},
        "409": {"$ref": "#/components/responses/Conflict"},
        "502": {"$ref": "#/components/responses/BadGateway"}
    }
}

__all__ = [
    'checkout_schema',
    'notificacion_schema',
    'confirmar_schema'
]
