"""
Immutable complex number type with transcendental functions.

This module provides the arithmetic used by the escape-time iteration and
the smooth-coloring formula. Every operation returns a new value; none of
them raise for ordinary input. Division by an exact zero and overflowing
exponentials propagate IEEE NaN/Inf components instead of exceptions.
"""

import math
from typing import Tuple, Union

from .exceptions import InvalidParameterError

Number = Union[int, float, complex, 'ComplexNumber']


def _ratio(numerator: float, denominator: float) -> float:
    """Divide with IEEE semantics for a zero denominator."""
    try:
        return numerator / denominator
    except ZeroDivisionError:
        if numerator == 0 or math.isnan(numerator):
            return math.nan
        return math.copysign(math.inf, numerator) * math.copysign(1.0, denominator)


def _exp(value: float) -> float:
    try:
        return math.exp(value)
    except OverflowError:
        return math.inf


def _sinh(value: float) -> float:
    try:
        return math.sinh(value)
    except OverflowError:
        return math.copysign(math.inf, value)


def _cosh(value: float) -> float:
    try:
        return math.cosh(value)
    except OverflowError:
        return math.inf


def _log(value: float) -> float:
    """Natural log that maps 0 to -inf rather than raising."""
    if value == 0:
        return -math.inf
    return math.log(value)


class ComplexNumber:
    """
    A complex number a + bi stored as two floats.

    Instances are immutable and hashable. The arithmetic methods mirror the
    Python operators, so ``z.add(w)`` and ``z + w`` are equivalent.
    """

    __slots__ = ('_a', '_b')

    def __init__(self, real: float = 0.0, imag: float = 0.0):
        """
        Create a complex number from rectangular coordinates.

        Args:
            real: Real part
            imag: Imaginary part

        NaN components are stored as given; use ``require_finite`` at input
        boundaries to reject them.
        """
        object.__setattr__(self, '_a', float(real))
        object.__setattr__(self, '_b', float(imag))

    def __setattr__(self, name, value):
        raise AttributeError("ComplexNumber is immutable")

    def __delattr__(self, name):
        raise AttributeError("ComplexNumber is immutable")

    def __reduce__(self):
        return (ComplexNumber, (self._a, self._b))

    @property
    def real(self) -> float:
        return self._a

    @property
    def imag(self) -> float:
        return self._b

    @classmethod
    def coerce(cls, value: Number) -> 'ComplexNumber':
        """Convert a Python number or ComplexNumber to a ComplexNumber."""
        if isinstance(value, ComplexNumber):
            return value
        if isinstance(value, (int, float)):
            return cls(value, 0.0)
        if isinstance(value, complex):
            return cls(value.real, value.imag)
        raise TypeError(f"Cannot convert {type(value).__name__} to ComplexNumber")

    @classmethod
    def from_polar(cls, r: float, theta: float) -> 'ComplexNumber':
        """
        Build a complex number from polar coordinates.

        Args:
            r: Magnitude, must be finite and non-negative
            theta: Angle in radians, must be finite

        Returns:
            r * (cos(theta) + i sin(theta)), or zero when r == 0

        Raises:
            InvalidParameterError: if r is negative or either value is non-finite
        """
        if r == 0:
            return ZERO
        if r < 0:
            raise InvalidParameterError(f"Cannot have a negative magnitude: {r}")
        if not math.isfinite(r):
            raise InvalidParameterError(f"Invalid magnitude: {r}")
        if not math.isfinite(theta):
            raise InvalidParameterError(f"Invalid angle: {theta}")
        return cls(r * math.cos(theta), r * math.sin(theta))

    def is_finite(self) -> bool:
        return math.isfinite(self._a) and math.isfinite(self._b)

    def require_finite(self, name: str = "value") -> 'ComplexNumber':
        """Return self, raising InvalidParameterError if a component is NaN or infinite."""
        if not self.is_finite():
            raise InvalidParameterError(f"Non-finite {name}: {self}")
        return self

    # Arithmetic

    def add(self, z: 'ComplexNumber') -> 'ComplexNumber':
        return ComplexNumber(self._a + z._a, self._b + z._b)

    def subtract(self, z: 'ComplexNumber') -> 'ComplexNumber':
        return ComplexNumber(self._a - z._a, self._b - z._b)

    def multiply(self, z: 'ComplexNumber') -> 'ComplexNumber':
        a, b = self._a, self._b
        return ComplexNumber(a * z._a - b * z._b, a * z._b + b * z._a)

    def divide(self, z: 'ComplexNumber') -> 'ComplexNumber':
        """
        Divide by z through its reciprocal.

        Dividing by an exact zero yields NaN/Inf components; callers that need
        a finite result must not pass a zero divisor.
        """
        return self.multiply(z.reciprocal())

    def reciprocal(self) -> 'ComplexNumber':
        """Return 1/this as (a - bi) / (a^2 + b^2)."""
        a, b = self._a, self._b
        denominator = a * a + b * b
        return ComplexNumber(_ratio(a, denominator), _ratio(-b, denominator))

    def conjugate(self) -> 'ComplexNumber':
        return ComplexNumber(self._a, -self._b)

    def negate(self) -> 'ComplexNumber':
        return ComplexNumber(-self._a, -self._b)

    def pow(self, power: 'ComplexNumber') -> 'ComplexNumber':
        """
        Raise this number to a complex power.

        Uses the polar identity this^p = exp(p * ln(this)) with the principal
        branch of the logarithm.

        Args:
            power: The exponent

        Returns:
            this ** power
        """
        a, b = self._a, self._b
        if a == 0 and b == 0:
            if power._a > 0:
                return ZERO
            if power._a == 0 and power._b == 0:
                return ONE
            return ComplexNumber(math.inf, 0.0)

        log_this = 0.5 * _log(a * a + b * b)
        theta = math.atan2(b, a)
        magnitude = _exp(power._a * log_this - power._b * theta)
        angle = power._b * log_this + power._a * theta
        if math.isinf(angle):
            return ComplexNumber(math.nan, math.nan)
        return ComplexNumber(magnitude * math.cos(angle), magnitude * math.sin(angle))

    # Exponential and logarithm

    def exp(self) -> 'ComplexNumber':
        magnitude = _exp(self._a)
        return ComplexNumber(magnitude * math.cos(self._b), magnitude * math.sin(self._b))

    def exp_base(self, base: 'ComplexNumber') -> 'ComplexNumber':
        """Return base ** this."""
        return base.pow(self)

    def ln(self) -> 'ComplexNumber':
        a, b = self._a, self._b
        return ComplexNumber(_log(a * a + b * b) / 2.0, math.atan2(b, a))

    def log(self, base: 'ComplexNumber') -> 'ComplexNumber':
        """Logarithm of this number in the given complex base."""
        return self.ln().divide(base.ln())

    def abs(self) -> float:
        return math.hypot(self._a, self._b)

    def abs_squared(self) -> float:
        return self._a * self._a + self._b * self._b

    def arg(self) -> float:
        return math.atan2(self._b, self._a)

    def _sqrt_parts(self) -> Tuple[float, float]:
        # principal square root as (r, t): sqrt(this) = r * (cos t + i sin t)
        a, b = self._a, self._b
        r = (a * a + b * b) ** 0.25
        t = math.atan2(b, a) / 2.0
        return r, t

    def sqrt(self) -> 'ComplexNumber':
        r, t = self._sqrt_parts()
        return ComplexNumber(r * math.cos(t), r * math.sin(t))

    # Trigonometric functions

    def sin(self) -> 'ComplexNumber':
        """sin(a+bi) = sin(a)cosh(b) + i cos(a)sinh(b)"""
        a, b = self._a, self._b
        return ComplexNumber(math.sin(a) * _cosh(b), math.cos(a) * _sinh(b))

    def cos(self) -> 'ComplexNumber':
        """cos(a+bi) = cos(a)cosh(b) - i sin(a)sinh(b)"""
        a, b = self._a, self._b
        return ComplexNumber(math.cos(a) * _cosh(b), -math.sin(a) * _sinh(b))

    def tan(self) -> 'ComplexNumber':
        """tan(a+bi) = (sin(2a) + i sinh(2b)) / (cos(2a) + cosh(2b))"""
        a, b = self._a, self._b
        denominator = math.cos(2 * a) + _cosh(2 * b)
        return ComplexNumber(_ratio(math.sin(2 * a), denominator),
                             _ratio(_sinh(2 * b), denominator))

    def csc(self) -> 'ComplexNumber':
        return self.sin().reciprocal()

    def sec(self) -> 'ComplexNumber':
        return self.cos().reciprocal()

    def cot(self) -> 'ComplexNumber':
        return self.tan().reciprocal()

    # Inverse trigonometric functions

    def arcsin(self) -> 'ComplexNumber':
        """arcsin(x) = -i ln(ix + sqrt(1 - x^2))"""
        r, t = ComplexNumber(1.0, 0.0).subtract(self.multiply(self))._sqrt_parts()
        a = r * math.cos(t) - self._b
        b = r * math.sin(t) + self._a
        return ComplexNumber(math.atan2(b, a), -0.5 * _log(a * a + b * b))

    def arccos(self) -> 'ComplexNumber':
        """arccos(x) = -i ln(x + i sqrt(1 - x^2))"""
        r, t = ComplexNumber(1.0, 0.0).subtract(self.multiply(self))._sqrt_parts()
        a = self._a - r * math.sin(t)
        b = self._b + r * math.cos(t)
        return ComplexNumber(math.atan2(b, a), -0.5 * _log(a * a + b * b))

    def arctan(self) -> 'ComplexNumber':
        """arctan(x) = (i/2) (ln(1 - ix) - ln(1 + ix))"""
        a, b = self._a, self._b
        # 1 - ix = (1 + b) - ia, 1 + ix = (1 - b) + ia
        r1 = (1 + b) * (1 + b) + a * a
        r2 = (1 - b) * (1 - b) + a * a
        t1 = math.atan2(-a, 1 + b)
        t2 = math.atan2(a, 1 - b)
        return ComplexNumber((t2 - t1) / 2.0, (_log(r1) - _log(r2)) / 4.0)

    def arccsc(self) -> 'ComplexNumber':
        return self.reciprocal().arcsin()

    def arcsec(self) -> 'ComplexNumber':
        return self.reciprocal().arccos()

    def arccot(self) -> 'ComplexNumber':
        return self.reciprocal().arctan()

    # Hyperbolic functions

    def sinh(self) -> 'ComplexNumber':
        """sinh(a+bi) = sinh(a)cos(b) + i cosh(a)sin(b)"""
        a, b = self._a, self._b
        return ComplexNumber(_sinh(a) * math.cos(b), _cosh(a) * math.sin(b))

    def cosh(self) -> 'ComplexNumber':
        """cosh(a+bi) = cosh(a)cos(b) + i sinh(a)sin(b)"""
        a, b = self._a, self._b
        return ComplexNumber(_cosh(a) * math.cos(b), _sinh(a) * math.sin(b))

    def tanh(self) -> 'ComplexNumber':
        """tanh(a+bi) = (sinh(2a) + i sin(2b)) / (cosh(2a) + cos(2b))"""
        a, b = self._a, self._b
        denominator = _cosh(2 * a) + math.cos(2 * b)
        return ComplexNumber(_ratio(_sinh(2 * a), denominator),
                             _ratio(math.sin(2 * b), denominator))

    def csch(self) -> 'ComplexNumber':
        return self.sinh().reciprocal()

    def sech(self) -> 'ComplexNumber':
        return self.cosh().reciprocal()

    def coth(self) -> 'ComplexNumber':
        return self.tanh().reciprocal()

    # Inverse hyperbolic functions

    def arcsinh(self) -> 'ComplexNumber':
        """arcsinh(x) = ln(x + sqrt(x^2 + 1))"""
        r, t = self.multiply(self).add(ONE)._sqrt_parts()
        a = self._a + r * math.cos(t)
        b = self._b + r * math.sin(t)
        return ComplexNumber(0.5 * _log(a * a + b * b), math.atan2(b, a))

    def arccosh(self) -> 'ComplexNumber':
        """arccosh(x) = ln(x + sqrt(x + 1) sqrt(x - 1))"""
        r1, t1 = self.add(ONE)._sqrt_parts()
        r2, t2 = self.subtract(ONE)._sqrt_parts()
        r = r1 * r2
        t = t1 + t2
        a = self._a + r * math.cos(t)
        b = self._b + r * math.sin(t)
        return ComplexNumber(0.5 * _log(a * a + b * b), math.atan2(b, a))

    def arctanh(self) -> 'ComplexNumber':
        """arctanh(x) = (ln(1 + x) - ln(1 - x)) / 2"""
        a, b = self._a, self._b
        r1 = (1 + a) * (1 + a) + b * b
        r2 = (1 - a) * (1 - a) + b * b
        t1 = math.atan2(b, 1 + a)
        t2 = math.atan2(-b, 1 - a)
        return ComplexNumber((_log(r1) - _log(r2)) / 4.0, (t1 - t2) / 2.0)

    def arccsch(self) -> 'ComplexNumber':
        return self.reciprocal().arcsinh()

    def arcsech(self) -> 'ComplexNumber':
        return self.reciprocal().arccosh()

    def arccoth(self) -> 'ComplexNumber':
        return self.reciprocal().arctanh()

    # Python numeric protocol

    def __add__(self, other: Number) -> 'ComplexNumber':
        try:
            return self.add(ComplexNumber.coerce(other))
        except TypeError:
            return NotImplemented

    __radd__ = __add__

    def __sub__(self, other: Number) -> 'ComplexNumber':
        try:
            return self.subtract(ComplexNumber.coerce(other))
        except TypeError:
            return NotImplemented

    def __rsub__(self, other: Number) -> 'ComplexNumber':
        try:
            return ComplexNumber.coerce(other).subtract(self)
        except TypeError:
            return NotImplemented

    def __mul__(self, other: Number) -> 'ComplexNumber':
        try:
            return self.multiply(ComplexNumber.coerce(other))
        except TypeError:
            return NotImplemented

    __rmul__ = __mul__

    def __truediv__(self, other: Number) -> 'ComplexNumber':
        try:
            return self.divide(ComplexNumber.coerce(other))
        except TypeError:
            return NotImplemented

    def __rtruediv__(self, other: Number) -> 'ComplexNumber':
        try:
            return ComplexNumber.coerce(other).divide(self)
        except TypeError:
            return NotImplemented

    def __pow__(self, other: Number) -> 'ComplexNumber':
        try:
            return self.pow(ComplexNumber.coerce(other))
        except TypeError:
            return NotImplemented

    def __neg__(self) -> 'ComplexNumber':
        return self.negate()

    def __abs__(self) -> float:
        return self.abs()

    def __complex__(self) -> complex:
        return complex(self._a, self._b)

    def __iter__(self):
        yield self._a
        yield self._b

    def __eq__(self, other) -> bool:
        if isinstance(other, ComplexNumber):
            return self._a == other._a and self._b == other._b
        if isinstance(other, (int, float, complex)):
            return complex(self._a, self._b) == other
        return NotImplemented

    def __hash__(self) -> int:
        return hash(complex(self._a, self._b))

    def __repr__(self) -> str:
        return f"ComplexNumber({self._a!r}, {self._b!r})"

    def __str__(self) -> str:
        sign = '-' if math.copysign(1.0, self._b) < 0 else '+'
        return f"{self._a} {sign} {abs(self._b)}i"


ZERO = ComplexNumber(0.0, 0.0)
ONE = ComplexNumber(1.0, 0.0)
I = ComplexNumber(0.0, 1.0)
NEGATIVE_ONE = ComplexNumber(-1.0, 0.0)
NEGATIVE_I = ComplexNumber(0.0, -1.0)
