"""
MedWell Backend — API Routes Package
======================================

Route Inventory:
    - root.py:       GET  /                        (liveness text)
                     GET  /health                  (dependency status)
    - profile.py:    GET/POST/PUT /api/user/profile
    - reminders.py:  GET/POST /api/reminders
    - assistant.py:  POST /api/symptom-checker/identify, POST /api/chat
    - records.py:    CRUD routers for prescriptions, medicines, vital signs,
                     symptom logs, activity and sleep logs
    - documents.py:  POST/GET /api/documents, DELETE /api/documents/{id}

Routes stay thin: read query/body, call one service operation, render the
tagged result.
"""
