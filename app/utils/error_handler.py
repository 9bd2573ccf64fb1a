"""
Sistema de manejo de errores personalizado.

Este módulo define todas las excepciones personalizadas de la aplicación
y proporciona utilidades para manejo consistente de errores. Cada error
lleva un código estable (`ErrorCode`) que las capas superiores traducen
a una respuesta para el usuario.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional


class ErrorCode(Enum):
    """
    Códigos de error estandardizados para la aplicación.
    """

    # Errores generales
    UNKNOWN_ERROR = "UNKNOWN_ERROR"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"
    DATABASE_ERROR = "DATABASE_ERROR"

    # Errores de tipo de cambio (FX)
    FX_INVALID_CURRENCY = "FX_INVALID_CURRENCY"
    FX_DISABLED = "FX_DISABLED"
    FX_PROVIDER_INVALID = "FX_PROVIDER_INVALID"
    FX_NOT_CONFIGURED = "FX_NOT_CONFIGURED"
    FX_LOOKUP_FAILED = "FX_LOOKUP_FAILED"
    FX_INVALID_RATE = "FX_INVALID_RATE"
    FX_INVALID_AMOUNT = "FX_INVALID_AMOUNT"

    # Errores de envío
    PRODUCT_SHIPPING_MISSING = "PRODUCT_SHIPPING_MISSING"
    SELLER_BUSINESS_MISSING = "SELLER_BUSINESS_MISSING"
    MIXED_SELLERS_NOT_SUPPORTED = "MIXED_SELLERS_NOT_SUPPORTED"
    SELLER_BUSINESS_NOT_FOUND = "SELLER_BUSINESS_NOT_FOUND"
    ADDRESS_INCOMPLETE = "ADDRESS_INCOMPLETE"
    CART_EMPTY = "CART_EMPTY"

    # Errores del carrier (Shippo)
    SHIPPO_NOT_CONFIGURED = "SHIPPO_NOT_CONFIGURED"
    SHIPPO_CUSTOMS_FAILED = "SHIPPO_CUSTOMS_FAILED"
    SHIPPO_CUSTOMS_OBJECT_ERROR = "SHIPPO_CUSTOMS_OBJECT_ERROR"


class ErrorSeverity(Enum):
    """
    Niveles de severidad para errores.
    """

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class AppException(Exception):
    """
    Excepción base para todas las excepciones personalizadas de la aplicación.
    """

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.UNKNOWN_ERROR,
        details: Optional[Dict[str, Any]] = None,
        status_code: int = 500,
        severity: ErrorSeverity = ErrorSeverity.MEDIUM,
        is_retryable: bool = False,
    ):
        """
        Inicializa la excepción.

        Args:
            message: Mensaje de error
            error_code: Código de error estandardizado
            details: Información adicional del error
            status_code: Código HTTP asociado
            severity: Severidad del error
            is_retryable: Si la operación puede reintentarse
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        self.status_code = status_code
        self.severity = severity
        self.is_retryable = is_retryable
        self.timestamp = datetime.now(timezone.utc)

    @property
    def code(self) -> str:
        """Código estable del error (valor del enum)."""
        return self.error_code.value

    def to_dict(self) -> Dict[str, Any]:
        """
        Convierte la excepción a diccionario.

        Returns:
            Dict: Representación de la excepción
        """
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "error_code": self.error_code.value,
            "details": self.details,
            "status_code": self.status_code,
            "severity": self.severity.value,
            "is_retryable": self.is_retryable,
            "timestamp": self.timestamp.isoformat(),
        }

    def __str__(self) -> str:
        """String representation del error."""
        return f"{self.error_code.value}: {self.message}"


class ValidationException(AppException):
    """
    Excepción para errores de validación de datos.
    """

    def __init__(
        self,
        message: str,
        field: str,
        invalid_value: Any = None,
        expected_format: Optional[str] = None,
        **kwargs,
    ):
        """
        Inicializa la excepción de validación.

        Args:
            message: Mensaje de error
            field: Campo que falló la validación
            invalid_value: Valor que causó el error
            expected_format: Formato esperado
            **kwargs: Argumentos adicionales para AppException
        """
        super().__init__(
            message=message,
            error_code=ErrorCode.VALIDATION_ERROR,
            status_code=422,
            severity=ErrorSeverity.LOW,
            **kwargs,
        )
        self.field = field
        self.invalid_value = invalid_value
        self.expected_format = expected_format

        self.details.update(
            {
                "field": field,
                "invalid_value": str(invalid_value) if invalid_value is not None else None,
                "expected_format": expected_format,
            }
        )


class FxException(AppException):
    """
    Excepción para fallos de tipo de cambio.

    Todos los fallos FX son terminales para esa conversión: nunca se
    sustituye una tasa estimada.
    """

    _STATUS_BY_CODE = {
        ErrorCode.FX_INVALID_CURRENCY: 422,
        ErrorCode.FX_INVALID_AMOUNT: 422,
        ErrorCode.FX_DISABLED: 409,
        ErrorCode.FX_PROVIDER_INVALID: 500,
        ErrorCode.FX_NOT_CONFIGURED: 500,
    }

    def __init__(
        self,
        message: str,
        error_code: ErrorCode,
        from_currency: Optional[str] = None,
        to_currency: Optional[str] = None,
        provider: Optional[str] = None,
        **kwargs,
    ):
        """
        Inicializa la excepción FX.

        Args:
            message: Mensaje de error
            error_code: Uno de los códigos FX_*
            from_currency: Moneda origen
            to_currency: Moneda destino
            provider: Proveedor FX configurado
            **kwargs: Argumentos adicionales para AppException
        """
        super().__init__(
            message=message,
            error_code=error_code,
            status_code=self._STATUS_BY_CODE.get(error_code, 502),
            severity=ErrorSeverity.MEDIUM,
            is_retryable=error_code in (ErrorCode.FX_LOOKUP_FAILED, ErrorCode.FX_INVALID_RATE),
            **kwargs,
        )
        self.from_currency = from_currency
        self.to_currency = to_currency
        self.provider = provider

        self.details.update({"from": from_currency, "to": to_currency, "provider": provider})


class ShippingException(AppException):
    """
    Excepción para reglas de negocio de envío (medidas, vendedores, direcciones).
    """

    def __init__(
        self,
        message: str,
        error_code: ErrorCode,
        problems: Optional[List[str]] = None,
        **kwargs,
    ):
        """
        Inicializa la excepción de envío.

        Args:
            message: Mensaje de error
            error_code: Código de error de envío
            problems: Lista de problemas detectados (uno por ítem)
            **kwargs: Argumentos adicionales para AppException
        """
        super().__init__(
            message=message,
            error_code=error_code,
            status_code=422,
            severity=ErrorSeverity.LOW,
            **kwargs,
        )
        self.problems = problems or []

        if self.problems:
            self.details.update({"problems": self.problems})


class CarrierAPIException(AppException):
    """
    Excepción para errores de la API del carrier (Shippo).
    """

    def __init__(
        self,
        message: str,
        error_code: ErrorCode,
        api_response_code: Optional[int] = None,
        endpoint: Optional[str] = None,
        provider_messages: Any = None,
        **kwargs,
    ):
        """
        Inicializa la excepción del carrier.

        Args:
            message: Mensaje de error
            error_code: Código SHIPPO_*
            api_response_code: Código HTTP devuelto por el carrier
            endpoint: Endpoint que falló
            provider_messages: Mensajes del carrier para diagnóstico
            **kwargs: Argumentos adicionales para AppException
        """
        severity = ErrorSeverity.MEDIUM
        if api_response_code and api_response_code >= 500:
            severity = ErrorSeverity.HIGH

        super().__init__(
            message=message,
            error_code=error_code,
            status_code=502,
            severity=severity,
            is_retryable=bool(api_response_code and api_response_code >= 500),
            **kwargs,
        )
        self.api_response_code = api_response_code
        self.endpoint = endpoint
        self.provider_messages = provider_messages

        self.details.update(
            {
                "api_response_code": api_response_code,
                "endpoint": endpoint,
                "provider_messages": provider_messages,
            }
        )


class DatabaseException(AppException):
    """
    Excepción para errores del almacén de documentos (MongoDB).
    """

    def __init__(
        self,
        message: str,
        operation: Optional[str] = None,
        collection: Optional[str] = None,
        **kwargs,
    ):
        """
        Inicializa la excepción de base de datos.

        Args:
            message: Mensaje de error
            operation: Operación que falló (initialization, find, close...)
            collection: Colección involucrada
            **kwargs: Argumentos adicionales para AppException
        """
        super().__init__(
            message=message,
            error_code=ErrorCode.DATABASE_ERROR,
            status_code=503,
            severity=ErrorSeverity.HIGH,
            is_retryable=True,
            **kwargs,
        )
        self.operation = operation
        self.collection = collection

        self.details.update({"operation": operation, "collection": collection})
