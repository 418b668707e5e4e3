import math
from typing import Iterable, List, Union

Number = Union[int, float]

def add(numbers: Iterable[Number]) -> Number:
    return sum(numbers)

def multiply(cost: Number, quantity: Number) -> Number:
    return cost * quantity

def apply_discount(amount: Number, percentage: Number) -> Number:
    """Price after taking ``percentage`` percent off ``amount``"""
    if not 0 <= percentage <= 100:
        raise ValueError("percentage must be between 0 and 100")
    result = amount * (100 - percentage) / 100
    return int(result) if float(result).is_integer() else result

def fibonacci(n: int) -> List[int]:
    """First ``n`` Fibonacci numbers, starting from 0"""
    if n < 0:
        raise ValueError("n must be non-negative")
    sequence = []
    a, b = 0, 1
    for _ in range(n):
        sequence.append(a)
        a, b = b, a + b
    return sequence

def factorial(number: int) -> int:
    if number < 0:
        raise ValueError("factorial is undefined for negative numbers")
    return math.factorial(number)

def first_primes(limit: int) -> List[int]:
    """First ``limit`` prime numbers in ascending order"""
    primes: List[int] = []
    candidate = 2
    while len(primes) < limit:
        root = math.isqrt(candidate)
        if all(candidate % p for p in primes if p <= root):
            primes.append(candidate)
        candidate += 1
    return primes
