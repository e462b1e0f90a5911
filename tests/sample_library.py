"""Small library used as the code under test in integration tests."""

import math


def pop_last(items):
    """Remove and return the last item; raises IndexError when empty."""
    return items.pop()


def checked_sqrt(x):
    if x < 0:
        raise ValueError("math domain error")
    return math.sqrt(x)


def buggy_abs(x):
    # Wrong for negative input
    return x


def flaky_fetch(key):
    raise TimeoutError(f"timed out fetching {key}")


class Account:
    def __init__(self, balance=0):
        self.balance = balance

    def withdraw(self, amount):
        if amount > self.balance:
            raise RuntimeError("insufficient funds")
        self.balance -= amount
        return self.balance
