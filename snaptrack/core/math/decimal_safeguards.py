"""
Decimal Safeguards — безопасные Decimal примитивы

Модуль обеспечивает детерминированную денежную и ratio-арифметику:
- Фиксированный локальный decimal-контекст (precision/rounding не зависят
  от thread-local контекста вызывающего кода)
- Конверсия входов в Decimal без прохода через binary float
- Безопасное деление: undefined → None (никогда fallback-число)
- Проверка конечности (NaN/Infinity не допускаются во входах)

КРИТИЧЕСКИЕ ИНВАРИАНТЫ:
1. Binary floating-point не участвует в денежной математике
2. Деление на ноль никогда не превращается в 0, Infinity или sentinel
3. DivisionByZero/InvalidOperation не выходят за пределы safe-функций
4. Все операции детерминированы и воспроизводимы
"""

from contextlib import contextmanager
from dataclasses import dataclass
from decimal import (
    ROUND_HALF_EVEN,
    Context,
    Decimal,
    DivisionByZero,
    InvalidOperation,
    localcontext,
)
from typing import Final, Iterable, Iterator

# =============================================================================
# DECIMAL-ПАРАМЕТРЫ
# =============================================================================

# Точность по умолчанию (значащих цифр) для всех метрик
DECIMAL_PRECISION_DEFAULT: Final[int] = 28

# Режим округления по умолчанию (banker's rounding)
DECIMAL_ROUNDING_DEFAULT: Final[str] = ROUND_HALF_EVEN

ZERO: Final[Decimal] = Decimal(0)
ONE: Final[Decimal] = Decimal(1)
HUNDRED: Final[Decimal] = Decimal(100)


# =============================================================================
# CONFIG
# =============================================================================


@dataclass(frozen=True)
class DecimalConfig:
    """Конфигурация decimal-контекста для вычислений метрик."""

    precision: int = DECIMAL_PRECISION_DEFAULT
    rounding: str = DECIMAL_ROUNDING_DEFAULT

    def make_context(self) -> Context:
        """
        Новый изолированный Context.

        Traps DivisionByZero/InvalidOperation включены: safe-функции ловят
        их явно и возвращают None. Overflow не трапится: результат
        становится Infinity, и safe-функции отбрасывают его как undefined.
        """
        return Context(
            prec=self.precision,
            rounding=self.rounding,
            traps=[DivisionByZero, InvalidOperation],
        )


DEFAULT_DECIMAL_CONFIG: Final[DecimalConfig] = DecimalConfig()


@contextmanager
def decimal_context(config: DecimalConfig | None = None) -> Iterator[Context]:
    """
    Локальный decimal-контекст для одного вычисления.

    Контекст вызывающего потока восстанавливается при выходе.
    """
    config = config or DEFAULT_DECIMAL_CONFIG
    with localcontext(config.make_context()) as ctx:
        yield ctx


# =============================================================================
# КОНВЕРСИЯ И ВАЛИДАЦИЯ
# =============================================================================


def is_finite_decimal(value: Decimal) -> bool:
    """
    Проверка, что Decimal конечен (не NaN, не Infinity).

    Args:
        value: Проверяемое значение

    Returns:
        True если значение конечное
    """
    return value.is_finite()


def to_decimal(value: Decimal | int | str | float) -> Decimal:
    """
    Конверсия в Decimal без потери точности.

    float конвертируется через repr (кратчайшее представление), а не через
    бинарное значение: to_decimal(0.1) == Decimal("0.1").

    Raises:
        ValueError: если значение не число или не конечно
        TypeError: для неподдерживаемых типов (включая bool)
    """
    if isinstance(value, bool):
        raise TypeError("bool is not a monetary value")
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, int):
        result = Decimal(value)
    elif isinstance(value, float):
        result = Decimal(repr(value))
    elif isinstance(value, str):
        try:
            result = Decimal(value.strip())
        except InvalidOperation as e:
            raise ValueError(f"Not a decimal number: {value!r}") from e
    else:
        raise TypeError(f"Unsupported numeric type: {type(value).__name__}")

    if not is_finite_decimal(result):
        raise ValueError(f"Decimal value contains NaN/Infinity: {value!r}")
    return result


def validate_finite(value: Decimal, field_name: str = "value") -> Decimal:
    """
    Проверка конечности Decimal-поля модели.

    Raises:
        ValueError: если значение NaN/Infinity
    """
    if not is_finite_decimal(value):
        raise ValueError(f"{field_name} must be finite, got {value}")
    return value


# =============================================================================
# БЕЗОПАСНЫЕ ОПЕРАЦИИ
# =============================================================================


def safe_divide(numerator: Decimal, denominator: Decimal) -> Decimal | None:
    """
    Безопасное деление: None вместо деления на ноль.

    В отличие от float-версий с fallback, undefined результат никогда не
    подменяется числом. Переполнение экспоненты (Infinity) тоже → None.

    Examples:
        >>> safe_divide(Decimal(10), Decimal(4))
        Decimal('2.5')
        >>> safe_divide(Decimal(10), Decimal(0)) is None
        True
    """
    if denominator == 0:
        return None
    try:
        result = numerator / denominator
    except (DivisionByZero, InvalidOperation):
        return None
    return result if result.is_finite() else None


def safe_power(base: Decimal, exponent: Decimal) -> Decimal | None:
    """
    Безопасное возведение в (дробную) степень.

    Отрицательное основание с дробной степенью не имеет вещественного
    результата → None. Результат за пределами Emax контекста (Overflow
    не трапится и даёт Infinity) → None.
    """
    try:
        result = base**exponent
    except (DivisionByZero, InvalidOperation):
        return None
    return result if result.is_finite() else None


def decimal_sum(values: Iterable[Decimal]) -> Decimal:
    """Сумма Decimal, начиная с Decimal(0) (пустая сумма → 0)."""
    total = ZERO
    for value in values:
        total += value
    return total
