"""
Services Layer

Draw generation engine and the services around it:
- Engine modules are pure: plain inputs in, MatchPlan out, no session, no I/O
- Session-aware services (emitter, dispatcher, scheduler) own persistence
- Nothing here depends on HTTP request/response objects
"""
