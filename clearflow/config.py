"""
Configuration management for the clearflow application
"""
import os

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


class Config:
    """Base configuration class"""

    # Flask Configuration
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'dev-secret-key-change-in-production'

    # Database Configuration
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or \
        f"mysql+pymysql://{os.environ.get('MYSQL_USER', 'root')}:{os.environ.get('MYSQL_PASSWORD', '')}@{os.environ.get('MYSQL_HOST', 'localhost')}/{os.environ.get('MYSQL_DB', 'clearflow')}"
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ENGINE_OPTIONS = {
        'pool_pre_ping': True,
        'pool_recycle': 300,
    }

    # Token Configuration
    JWT_SECRET = os.environ.get('JWT_SECRET') or 'dev-jwt-secret-change-in-production'
    JWT_EXPIRES_MIN = int(os.environ.get('JWT_EXPIRES_MIN', 60))

    # Clearance workflow
    CLEARANCE_CHAIN = os.environ.get('CLEARANCE_CHAIN', 'standard')
    CERTIFICATE_FEE = float(os.environ.get('CERTIFICATE_FEE', 500))
    CURRENCY = os.environ.get('CURRENCY', 'BDT')

    # Payment Gateway (SSLCommerz)
    SSLCOMMERZ_STORE_ID = os.environ.get('SSLCOMMERZ_STORE_ID')
    SSLCOMMERZ_STORE_PASSWORD = os.environ.get('SSLCOMMERZ_STORE_PASSWORD')
    SSLCOMMERZ_BASE_URL = os.environ.get('SSLCOMMERZ_BASE_URL', 'https://sandbox.sslcommerz.com')
    SSLCOMMERZ_TIMEOUT = int(os.environ.get('SSLCOMMERZ_TIMEOUT', 30))
    PAYMENT_CALLBACK_TOKEN = os.environ.get('PAYMENT_CALLBACK_TOKEN')
    PUBLIC_BASE_URL = os.environ.get('PUBLIC_BASE_URL', 'http://localhost:5000')
    # Student-facing page the gateway sends the browser back to
    PAYMENT_RESULT_URL = os.environ.get('PAYMENT_RESULT_URL', 'http://localhost:3000/payment/result')

    # Blob storage
    BLOB_BACKEND = os.environ.get('BLOB_BACKEND', 'local')
    UPLOAD_FOLDER = os.environ.get('UPLOAD_FOLDER', 'uploads/documents')
    ALLOWED_EXTENSIONS = {'png', 'jpg', 'jpeg', 'pdf'}
    MAX_CONTENT_LENGTH = 16 * 1024 * 1024  # 16MB max file size

    # AWS Configuration
    AWS_ACCESS_KEY_ID = os.environ.get('AWS_ACCESS_KEY_ID')
    AWS_SECRET_ACCESS_KEY = os.environ.get('AWS_SECRET_ACCESS_KEY')
    AWS_REGION = os.environ.get('AWS_REGION', 'ap-southeast-2')
    S3_BUCKET_NAME = os.environ.get('S3_BUCKET_NAME')

    # Email Configuration
    MAIL_ENABLED = os.environ.get('MAIL_ENABLED', 'false').lower() in ['true', 'on', '1']
    MAIL_SERVER = os.environ.get('MAIL_SERVER', 'smtp.gmail.com')
    MAIL_PORT = int(os.environ.get('MAIL_PORT', 587))
    MAIL_USE_TLS = os.environ.get('MAIL_USE_TLS', 'true').lower() in ['true', 'on', '1']
    MAIL_USERNAME = os.environ.get('MAIL_USERNAME')
    MAIL_PASSWORD = os.environ.get('MAIL_PASSWORD')

    # Application Settings
    CORS_ORIGINS = os.environ.get('CORS_ORIGINS', '*')
    LOG_LEVEL = os.environ.get('LOG_LEVEL')
    DEBUG = os.environ.get('FLASK_DEBUG', 'False').lower() in ['true', 'on', '1']
    TESTING = False

    @staticmethod
    def init_app(app):
        """Initialize application with configuration"""
        pass


class DevelopmentConfig(Config):
    """Development configuration"""
    DEBUG = True
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or 'sqlite:///clearflow.db'


class ProductionConfig(Config):
    """Production configuration"""
    DEBUG = False
    SECRET_KEY = os.environ.get('SECRET_KEY')
    JWT_SECRET = os.environ.get('JWT_SECRET')

    @classmethod
    def init_app(cls, app):
        Config.init_app(app)

        # Ensure secrets are set in production
        if not app.config['SECRET_KEY']:
            raise ValueError("SECRET_KEY environment variable must be set in production")
        if not app.config['JWT_SECRET']:
            raise ValueError("JWT_SECRET environment variable must be set in production")


class TestingConfig(Config):
    """Testing configuration"""
    TESTING = True
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SQLALCHEMY_ENGINE_OPTIONS = {}
    JWT_SECRET = 'testing-jwt-secret'
    SSLCOMMERZ_STORE_ID = 'teststore'
    SSLCOMMERZ_STORE_PASSWORD = 'teststore@ssl'
    PAYMENT_CALLBACK_TOKEN = 'callback-token'
    MAIL_ENABLED = False


# Configuration mapping
config = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig,
    'default': DevelopmentConfig
}
