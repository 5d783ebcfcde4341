"""Seed records used when a collection has never been persisted."""
from typing import List

from .models import BookingStatus, ResourceType, RoleEnum
from .schemas import Booking, Professor, Resource


def default_professors() -> List[Professor]:
    return [
        Professor(id="1", name="João Santos", email="joao@escola.com", role=RoleEnum.PROFESSOR, department="Matemática"),
        Professor(id="2", name="Maria Silva", email="maria@escola.com", role=RoleEnum.PROFESSOR, department="Química"),
        Professor(id="3", name="Admin Escola", email="admin@escola.com", role=RoleEnum.ADMIN, department="Administração"),
    ]


def default_resources() -> List[Resource]:
    return [
        Resource(
            id="1",
            name="Chromebook Set A",
            type=ResourceType.CHROMEBOOK,
            description="30 Chromebooks para sala de aula",
            capacity=30,
            location="Laboratório de Informática",
            available=True,
        ),
        Resource(
            id="2",
            name="Laboratório de Química",
            type=ResourceType.LAB_QUIMICA,
            description="Laboratório completo com equipamentos",
            capacity=25,
            location="Bloco B - Sala 201",
            available=True,
        ),
        Resource(
            id="3",
            name="Laboratório de Física",
            type=ResourceType.LAB_FISICA,
            description="Laboratório com equipamentos de física",
            capacity=25,
            location="Bloco B - Sala 301",
            available=True,
        ),
    ]


def default_bookings() -> List[Booking]:
    return [
        Booking(
            id="1",
            professor_id="1",
            professor_name="João Santos",
            resource_id="1",
            resource_name="Chromebook Set A",
            date="2024-01-15",
            start_time="08:20",
            end_time="09:00",
            series="1º Ano EM",
            purpose="Aula de programação básica",
            status=BookingStatus.CONFIRMED,
            created_at="2024-01-10T10:00:00Z",
        ),
        Booking(
            id="2",
            professor_id="2",
            professor_name="Maria Silva",
            resource_id="2",
            resource_name="Laboratório de Química",
            date="2024-01-16",
            start_time="14:20",
            end_time="15:00",
            series="2º Ano EM",
            purpose="Experimento de reações químicas",
            status=BookingStatus.CONFIRMED,
            created_at="2024-01-11T14:30:00Z",
        ),
    ]
