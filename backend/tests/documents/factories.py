"""
Factories for documents app models.
"""

import factory
from factory.django import DjangoModelFactory

from apps.documents.models import ClientDocument
from tests.cases.factories import CaseFactory


class ClientDocumentFactory(DjangoModelFactory):
    """Factory for ClientDocument model."""

    class Meta:
        model = ClientDocument

    case = factory.SubFactory(CaseFactory)
    person = factory.LazyAttribute(lambda o: o.case.person if o.case else None)
    case_reference = factory.LazyAttribute(lambda o: o.case.case_reference if o.case else "")
    name = factory.Sequence(lambda n: f"passport-{n}.pdf")
    document_type = "passport"
    storage_path = factory.Sequence(lambda n: f"cases/documents/passport-{n}.pdf")
    mime_type = "application/pdf"
    size_bytes = 2048
    status = ClientDocument.Status.PENDING
    is_client_visible = True
