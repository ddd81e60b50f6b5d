"""Day and date naming for insight reports.

All day lists are indexed Monday=0 ... Sunday=6, matching ``date.weekday()``.
"""

from datetime import date


# Spanish day names (Monday through Sunday)
SPANISH_DAYS = [
    "Lunes", "Martes", "Miércoles", "Jueves", "Viernes",
    "Sábado", "Domingo"
]

# English day names (Monday through Sunday)
ENGLISH_DAYS = [
    "Monday", "Tuesday", "Wednesday", "Thursday", "Friday",
    "Saturday", "Sunday"
]

# Spanish month names (January through December)
SPANISH_MONTHS = [
    "Enero", "Febrero", "Marzo", "Abril", "Mayo", "Junio",
    "Julio", "Agosto", "Septiembre", "Octubre", "Noviembre", "Diciembre"
]

# Day name abbreviations (Monday through Sunday)
SPANISH_DAY_ABBREVIATIONS = [
    "Lun", "Mar", "Mié", "Jue", "Vie", "Sáb", "Dom"
]
ENGLISH_DAY_ABBREVIATIONS = [
    "Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"
]


def format_date_spanish(d: date) -> str:
    """Format date in Spanish format like 'Jueves 20 de Noviembre'.

    Args:
        d: Date object to format

    Returns:
        Formatted date string in Spanish (e.g., "Jueves 20 de Noviembre")
    """
    return f"{SPANISH_DAYS[d.weekday()]} {d.day} de {SPANISH_MONTHS[d.month - 1]}"
