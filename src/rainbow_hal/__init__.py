"""
rainbow_hal - driver layer for the Pimoroni Rainbow HAT

APA102 LED strip, BMP280 temperature / pressure sensor, HT16K33 segment
display, three buttons, three LEDs and a buzzer behind one HatController.
"""

__version__ = "0.1.0"
