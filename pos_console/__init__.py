# ==============================================================================
# POS_CONSOLE - Consola de transacciones de inventario
# ==============================================================================
# Arma borradores de transacción (venta, reabastecimiento, ajuste,
# transferencia), los valida y los envía a un backend REST; también muestra
# el historial de transacciones con nombres legibles.
# ==============================================================================

__version__ = '1.0.0'
