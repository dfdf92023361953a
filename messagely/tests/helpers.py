from messagely.schemas.users import RegisterIn


def make_user(username, password='secret1', **extra):
    data = {
        'username': username,
        'password': password,
        'first_name': username.title(),
        'last_name': 'Tester',
        'phone': '+15550001111',
    }
    data.update(extra)
    return RegisterIn(**data)


async def register(ac, username, password='secret1', **extra):
    body = make_user(username, password, **extra).model_dump()
    res = await ac.post('/register', json=body)
    assert res.status_code == 200, res.text
    return res.json()['token']


def bearer(token):
    return {'Authorization': f'Bearer {token}'}
