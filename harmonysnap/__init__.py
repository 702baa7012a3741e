"""HarmonySnap: retune melody notes to the chord symbols of a lead sheet."""

__version__ = "0.1.0"
