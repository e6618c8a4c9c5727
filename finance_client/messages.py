"""
User-facing texts.

Fallbacks are shown when the server gives no error text of its own.
The app is localized in Spanish, like the server's messages.
"""

ERROR_TITLE = "Error"
SUCCESS_TITLE = "Éxito"

# Loading
LEDGER_LOAD_FAILED = "No se pudo cargar los datos."
BUDGET_LOAD_FAILED = "No se pudo cargar el resumen del presupuesto."
PROJECTIONS_LOAD_FAILED = "No se pudo cargar las proyecciones."

# Writes
MOVEMENT_CREATE_FAILED = "No se pudo registrar el movimiento."
MOVEMENT_CREATED = "Movimiento registrado correctamente."
MOVEMENT_DELETE_FAILED = "No se pudo eliminar el movimiento."
ACCOUNT_ADJUST_FAILED = "No se pudo reajustar la cuenta."
ACCOUNT_ADJUSTED = "La cuenta ha sido reajustada."
DEPOSIT_FAILED = "No se pudo realizar el abono."
WITHDRAWAL_FAILED = "No se pudo realizar el retiro."
RESERVE_CREATE_FAILED = "No se pudo crear la reserva."
RESERVE_UPDATE_FAILED = "No se pudo editar la reserva."
RESERVE_QUOTA_UPDATE_FAILED = "No se pudo actualizar la reserva."
BULK_DEPOSIT_FAILED = "No se pudo realizar el abono masivo."
BULK_DEPOSIT_DONE = "Abono masivo realizado correctamente."
MONTH_RESET_FAILED = "No se pudo reiniciar el mes."
MONTH_RESET_DONE = "El mes se ha reiniciado correctamente."
ALLOCATION_SAVE_FAILED = "No se pudo guardar la configuración."
ALLOCATION_SAVED = "Configuración guardada correctamente."
RESERVE_CREATED = "Reserva creada correctamente."
RESERVE_UPDATED = "Reserva actualizada correctamente."
DEPOSIT_DONE = "Abono realizado correctamente."
WITHDRAWAL_DONE = "Retiro realizado correctamente."
MOVEMENT_DELETED = "Movimiento eliminado correctamente."
ACCOUNT_CREATE_FAILED = "No se pudo crear la cuenta."
ACCOUNT_CREATED = "Cuenta creada correctamente."
PROJECTION_CREATE_FAILED = "No se pudo agregar la proyección."
PROJECTION_UPDATE_FAILED = "No se pudo editar la proyección."
PROJECTION_DELETE_FAILED = "No se pudo eliminar la proyección."
PROJECTION_CREATED = "Proyección agregada correctamente."
PROJECTION_UPDATED = "Proyección actualizada correctamente."
PROJECTION_DELETED = "Proyección eliminada correctamente."

# Validation
VALUE_AND_CONCEPT_REQUIRED = "El valor y el concepto son obligatorios."
ALL_FIELDS_REQUIRED = "Todos los campos son obligatorios."
VALUE_REQUIRED = "El valor no puede estar vacío."
ADJUSTMENT_VALUE_REQUIRED = (
    "Debe ingresar un valor o calcularlo con el cupo total y disponible."
)
VALUE_MUST_BE_POSITIVE = "El valor debe ser mayor que cero."
AMOUNT_CANNOT_BE_NEGATIVE = "Los valores no pueden ser negativos."
CONCEPT_REQUIRED = "El concepto no puede estar vacío."
ACCOUNT_REQUIRED = "Debe seleccionar una cuenta."
ACCOUNT_NAME_REQUIRED = "El nombre de la cuenta no puede estar vacío."
WEEKS_MUST_BE_POSITIVE = "El número de semanas debe ser mayor que cero."
DIRECTION_NOT_ALLOWED = "El tipo de movimiento no es válido para una cuenta."
INCOME_REQUIRED = "Por favor, ingresa un valor válido para tu ingreso semanal."
NEGATIVE_PERCENTAGES = "Los porcentajes no pueden ser negativos."
PERCENTAGE_TOTAL = "La suma de los porcentajes debe ser 100, actualmente es {total}."
