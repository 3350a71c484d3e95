"""
Production environment configuration overrides
"""

from dataclasses import dataclass
from config.app_config import AppConfig


@dataclass
class ProductionConfig(AppConfig):
    """Production environment configuration"""
    
    def __post_init__(self):
        
        # Production-specific overrides
        self.environment = "production"
        self.debug = False
        
        # Production logging - less verbose, focus on errors
        self.logging.level = "INFO"
        self.logging.enable_file_logging = True
        self.logging.log_file = "logs/prod-app.log"
        
        # Production UI - clean and professional
        self.ui.app_title = "📦 Product Manager"
        
        # Production security settings - the demo backends are never served
        self.auth.backend = "pbkdf2"
        self.products.backend = "storage"
        self.storage.enable_record_store = True


def get_production_config() -> ProductionConfig:
    """Get production-specific configuration"""
    return ProductionConfig()
