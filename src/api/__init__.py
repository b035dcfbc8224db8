# src/api/__init__.py
# =====================
# API Layer — SignRelay
#
#   POST /transcribe     : audio upload → speech2sign Space
#   POST /process-video  : video upload → sign2speech Space
#   GET  /health         : connection status per remote Space
#
# All relay failures share one envelope: {"error": message}.
