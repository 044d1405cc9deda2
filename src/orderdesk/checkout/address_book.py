"""AddressBook aggregate: a customer's saved delivery addresses.

At checkout the submitted address is matched exactly against the saved
ones (name, street, city, state, postcode and phone). A match is reused;
anything else is saved as a new entry.
"""

from protean.exceptions import ObjectNotFoundError
from protean.fields import HasMany, Identifier, String
from protean.utils.globals import current_domain

from orderdesk.domain import orderdesk

MATCH_FIELDS = ("first_name", "last_name", "street", "city", "state", "postcode", "phone")


@orderdesk.entity(part_of="AddressBook")
class SavedAddress:
    address_type = String(max_length=20)
    first_name = String(required=True, max_length=100)
    last_name = String(required=True, max_length=100)
    street = String(required=True, max_length=500)
    city = String(required=True, max_length=100)
    state = String(required=True, max_length=100)
    postcode = String(required=True, max_length=6)
    phone = String(required=True, max_length=20)
    email = String(max_length=254)

    def matches(self, details: dict) -> bool:
        return all((getattr(self, f) or "").strip() == (details.get(f) or "").strip() for f in MATCH_FIELDS)


@orderdesk.aggregate
class AddressBook:
    customer_id = Identifier(identifier=True)
    addresses = HasMany(SavedAddress)

    def find(self, details: dict) -> SavedAddress | None:
        return next((a for a in (self.addresses or []) if a.matches(details)), None)

    def remember(self, details: dict) -> SavedAddress:
        """Return the matching saved address, saving ``details`` if there is none."""
        existing = self.find(details)
        if existing is not None:
            return existing
        address = SavedAddress(**{f: details.get(f) for f in (*MATCH_FIELDS, "address_type", "email")})
        self.add_addresses(address)
        return address


def remember_address(customer_id: str, details: dict) -> str:
    """Reuse or store the checkout address for ``customer_id``; returns its id."""
    repo = current_domain.repository_for(AddressBook)
    try:
        book = repo.get(customer_id)
    except ObjectNotFoundError:
        book = AddressBook(customer_id=customer_id)

    address = book.remember(details)
    repo.add(book)
    return str(address.id)
