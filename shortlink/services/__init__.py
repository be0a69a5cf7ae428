"""
Services module for business logic separation.

- BindingService: create, update, inspect and delete bindings
- RedirectService: resolve ids to redirect targets at read time
- ImportService: bulk import of bindings from CSV records
- EventSink: asynchronous recording of lifecycle events
"""
