from .stock_alert import StockAlertSerializer

__all__ = ["StockAlertSerializer"]
