from project50.crud.progress_documents import crud_progress_document

__all__ = [
    "crud_progress_document",
]
