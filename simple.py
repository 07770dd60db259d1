import asyncio
from typing import Optional

from starrest import Collection, Resource, ResourceConfig, StarRestConfig, configure_starrest


class Contact(Resource):
    model_config = ResourceConfig(url="/contacts",
                                  resource_name="contact",
                                  resource_properties=["first_name", "last_name"])

    first_name: Optional[str] = None
    last_name: Optional[str] = None

    def validate_resource(self):
        if not self.first_name:
            return "first_name can't be blank"


async def main():
    # STARREST_BASE_URL=http://localhost:3000 python simple.py
    store = configure_starrest(StarRestConfig.from_env())
    store.contacts = Collection(Contact)

    store.contacts.subscribe(lambda event: print(f"📋 {len(store.contacts)} contacts"))

    await store.contacts.find_all()

    contact = Contact(first_name="Joe", last_name="Blow")
    contact.subscribe(lambda event: print(f"✏️  {contact.id}: {event.changes}"))
    await contact.save_resource()
    store.contacts.load(contact.model_dump())

    dan = store.contacts.find_by_id(3)
    print(f"🔎 contact 3 is {dan.state}")
    await store.transport.aclose()
    print(f"🔎 contact 3 is {dan.state}: {dan.first_name} {dan.last_name}")


if __name__ == "__main__":
    asyncio.run(main())
