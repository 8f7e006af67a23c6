from .outcome import SUPERSEDED, Failed, Fired, Outcome, Superseded
from .wrapper import BoundDebounced, Debounced, State, debounce

__all__ = [
    'BoundDebounced',
    'Debounced',
    'Failed',
    'Fired',
    'Outcome',
    'State',
    'SUPERSEDED',
    'Superseded',
    'debounce',
]


# Example Usage:
# from debounce import debounce
#
# def square(num):
#     return num**2
#
# debounced_square = debounce(square, 1.0)
#
# async def on_resize():
#     try:
#         val = await asyncio.wait_for(debounced_square(4), timeout=5)
#     except TimeoutError:
#         return  # Superseded by a later resize
#     # One second after the resizing stops:
#     print(f'Result: {val}')  # Result: 16
