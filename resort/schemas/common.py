from decimal import Decimal
from typing import Annotated, Union

from pydantic import PlainSerializer


def money_to_number(value: Decimal) -> Union[int, float]:
    """1020 stays 1020, 1020.50 becomes 1020.5"""
    if value == value.to_integral_value():
        return int(value)
    return float(value)


# Decimal inside the service, plain JSON number on the wire
Money = Annotated[
    Decimal,
    PlainSerializer(money_to_number, return_type=Union[int, float], when_used="json"),
]
