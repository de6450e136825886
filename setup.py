from setuptools import setup, find_packages

package_name = 'shot_planner'

setup(
    name=package_name,
    version='0.1.0',
    packages=find_packages(exclude=['tests', 'tests.*']),
    install_requires=[
        'setuptools',
        'numpy',
        'scipy',
        'pyyaml',
    ],
    extras_require={
        'test': ['pytest'],
    },
    zip_safe=True,
    author='Shot Planner Team',
    author_email='shot-planner@example.com',
    description='Bounded-curvature intercept feasibility and shot path sampling for ground agents',
    license='MIT',
    python_requires='>=3.8',
    tests_require=['pytest'],
)
