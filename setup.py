from setuptools import setup

setup(
    name='humanid',
    version='1.0',
    description='Bijective encoding of 64-bit integers as memorable adjective-noun IDs.',
    python_requires='>=3.9',
    py_modules=[
        'app',
        'config',
        'core_logic',
        'encoding',
        'models',
        'mymath',
        'obfuscation',
        'wordbank',
    ],
    data_files=[('data', ['data/adjectives.txt', 'data/nouns.txt'])],
    install_requires=[
        'fastapi',
        'pydantic>=2',
        'slowapi',
        'uvicorn',
    ],
    extras_require={
        'test': ['pytest', 'httpx'],
    },
)
