from .apa102_strip import LedStripDriver, RAINBOW_COLORS, encode_led, encode_leds, byte_to_bits


__all__ = [
    "LedStripDriver",
    "RAINBOW_COLORS",
    "encode_led",
    "encode_leds",
    "byte_to_bits",
]
