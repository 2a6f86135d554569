"""
MedWell Backend — Services Layer
==================================

What:  Business logic between routes (HTTP) and the document store / completion
       provider. Every public operation returns a tagged result (Ok | Err).

Service Inventory:
    - CompletionService (abstract): interface for text completion providers
    - GeminiCompletionService: Google Gemini implementation
    - ProfileService: user profile fetch / upsert / partial update
    - ReminderService: reminder list / create
    - AssistantService: symptom triage and health chat prompts
    - RecordService: shared CRUD for prescriptions, medicines, vitals, symptoms,
      activity and sleep logs
    - FileService / DocumentService: uploaded document storage and records
"""
