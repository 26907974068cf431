# couture_payments/utils/__init__.py
