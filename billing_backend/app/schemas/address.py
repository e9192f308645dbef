from pydantic import BaseModel


class Address(BaseModel):
    street: str = ""
    city: str = ""
    state: str = ""
    zip_code: str = ""
    country: str = ""

    def is_complete(self) -> bool:
        return all(value.strip() for value in (self.street, self.city, self.state, self.zip_code, self.country))
