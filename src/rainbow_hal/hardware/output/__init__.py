from .buzzer import Buzzer


__all__ = ["Buzzer"]
