"""
Formatierungsfunktionen für Meldungen.

Konvertiert numerische Werte in lesbare Strings für Fehler- und Logmeldungen.
"""


def format_frequency(hz: float) -> str:
    """
    Formatiere Frequenz in lesbares Format.

    Args:
        hz: Frequenz in Hz

    Returns:
        Formatierter String (z.B. "1.5 kHz" oder "250 Hz")
    """
    if abs(hz) >= 1000:
        return f"{hz/1000:.1f} kHz"
    else:
        return f"{hz:.0f} Hz"


def format_sample_rate(sr: float) -> str:
    """
    Formatiere Samplerate.

    Args:
        sr: Samplerate in Hz (darf nach Resampling gebrochen sein)

    Returns:
        Formatierter String (z.B. "44.1 kHz" oder "48 kHz")
    """
    if float(sr).is_integer() and int(sr) % 1000 == 0:
        return f"{int(sr) // 1000} kHz"
    else:
        return f"{sr / 1000:.1f} kHz"


def format_ratio(upsample: int, downsample: int) -> str:
    """
    Formatiere Resampling-Verhältnis.

    Args:
        upsample: Upsampling-Faktor
        downsample: Downsampling-Faktor

    Returns:
        Formatierter String (z.B. "3/2 (1.5000)")
    """
    return f"{upsample}/{downsample} ({upsample / downsample:.4f})"

