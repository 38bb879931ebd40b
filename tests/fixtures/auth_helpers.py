from httpx import AsyncClient

PASSWORD = "SecurePass123!"


async def register(client: AsyncClient, email="jane@example.com", password=PASSWORD):
    response = await client.post(
        "/auth/register",
        json={
            "name": "Jane",
            "email": email,
            "password": password,
            "password_confirmation": password,
        },
    )
    assert response.status_code == 201, response.text
    return response.json()


def bearer(tokens: dict) -> dict:
    return {"Authorization": f"Bearer {tokens['access_token']}"}
