# This file is used to allowlist unused code in the project.
# https://github.com/jendrikseipp/vulture?tab=readme-ov-file#handling-false-positives
# type: ignore


owner  # Descriptor protocol
__call__  # Function protocol

_.outcome  # public method (src/debounce/wrapper.py:86)
_.state  # public property (src/debounce/wrapper.py:73)
_.pending  # public property (src/debounce/wrapper.py:79)
BoundDebounced  # public export
State  # public export
