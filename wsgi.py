from app import configurar_logging, create_app

configurar_logging()
app = create_app()
