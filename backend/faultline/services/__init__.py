# backend/faultline/services/__init__.py
